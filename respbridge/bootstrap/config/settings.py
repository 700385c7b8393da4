from pathlib import Path
from typing import Annotated, ClassVar, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from respbridge.core.models.config import MAX_DEPTH, CodecConfig


class RespBridgeSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RESPBRIDGE_",
        extra="forbid"
    )

    config_file: ClassVar[Path | None] = None

    max_depth: Annotated[
        int,
        Field(
            description=(
                "Maximum nesting of aggregates accepted by the decoder and\n"
                "produced by the encoder. Deeper input fails with NestingTooDeep.\n"
                f"Must be between 1 and {MAX_DEPTH}."
            ),
            default=128,
            ge=1,
            le=MAX_DEPTH
        )
    ]

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(
            description="Logging verbosity used by the command line tool.",
            default="WARNING"
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: tuple[PydanticBaseSettingsSource, ...] = (init_settings, env_settings)
        if cls.config_file is not None:
            sources += (YamlConfigSettingsSource(settings_cls, yaml_file=cls.config_file),)
        return sources

    @classmethod
    def from_file(cls, config_file: Path | None) -> "RespBridgeSettings":
        """Load settings with `config_file` as the lowest priority source."""
        bound = type(
            cls.__name__, (cls,), {"__module__": cls.__module__, "config_file": config_file}
        )
        return bound()

    def to_codec_config(self) -> CodecConfig:
        return CodecConfig(max_depth=self.max_depth)
