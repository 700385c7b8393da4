import os
from typing import Generator

import pytest
import yaml

from respbridge.bootstrap import deps
from respbridge.bootstrap.config.loader import get_cli_args
from respbridge.core.facade import RespCodec
from respbridge.core.models.config import CodecConfig


@pytest.fixture
def codec() -> RespCodec:
    return RespCodec(CodecConfig())


@pytest.fixture
def shallow_codec() -> RespCodec:
    return RespCodec(CodecConfig(max_depth=2))


@pytest.fixture
def config_file(tmp_path):
    file = tmp_path / "respbridge.yaml"
    file.write_text(yaml.dump({"max_depth": 16, "log_level": "DEBUG"}))
    return file


@pytest.fixture
def clean_env(monkeypatch, tmp_path) -> Generator[None, None, None]:
    """Isolate settings from the caller's environment and working directory."""
    for name in list(os.environ):
        if name.startswith("RESPBRIDGE"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)

    caches = (deps.get_settings, deps.get_config, deps.get_codec, get_cli_args)
    for cached in caches:
        cached.cache_clear()
    try:
        yield
    finally:
        for cached in caches:
            cached.cache_clear()
