import json
from functools import lru_cache

import yaml
from pydantic import ValidationError

from respbridge.bootstrap.config.loader import get_configfile
from respbridge.bootstrap.config.settings import RespBridgeSettings
from respbridge.core.facade import RespCodec
from respbridge.core.models.config import CodecConfig
from respbridge.core.ports.render import Renderer
from respbridge.infra.format_renderer import JsonRenderer, YamlRenderer


@lru_cache
def get_settings(config: str | None = None) -> RespBridgeSettings:
    try:
        return RespBridgeSettings.from_file(get_configfile(config))
    except yaml.YAMLError as ex:
        raise SystemExit(f"Configuration file is not valid YAML: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))


@lru_cache
def get_config(config: str | None = None) -> CodecConfig:
    return get_settings(config).to_codec_config()


@lru_cache
def get_codec(config: str | None = None) -> RespCodec:
    return RespCodec(get_config(config))


def get_renderer(fmt: str) -> Renderer:
    if fmt == "yaml":
        return YamlRenderer()
    return JsonRenderer()
