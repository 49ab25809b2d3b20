from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Annotated, ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.filesystem.plan_repository import PLAN_SUFFIX
from domain.models import GridSpec

DEFAULT_CONFIG_PATH = Path("anchorviz.yaml")


class OutputFormat(str, Enum):
    PNG = "png"
    EXCALIDRAW = "excalidraw"
    JSON = "json"


OUTPUT_SUFFIXES: dict[OutputFormat, str] = {
    OutputFormat.PNG: ".png",
    OutputFormat.EXCALIDRAW: ".excalidraw",
    OutputFormat.JSON: PLAN_SUFFIX,
}


def _format_tokens(raw_value: str) -> list[str]:
    """Split `png, json` or `[png, json]` into lowercase format names."""
    raw = raw_value.strip().removeprefix("[").removesuffix("]")
    tokens = (token.strip().strip("'\"").lower() for token in raw.split(","))
    return [token for token in tokens if token]


class LayoutSettings(BaseModel):
    # Width is checked by GridSpec so that it surfaces as InvalidConfiguration.
    width: int = 2
    box_width: int = 240
    box_height: int = 60
    header_height: int = 100
    separator_width: int = 2
    buffer: int = 8
    title_font_size: int = 24
    text_font_size: int = 20

    def to_grid_spec(self, width: int | None = None) -> GridSpec:
        return GridSpec(
            width=self.width if width is None else width,
            box_width=self.box_width,
            box_height=self.box_height,
            header_height=self.header_height,
            separator_width=self.separator_width,
            buffer=self.buffer,
            title_font_size=self.title_font_size,
            text_font_size=self.text_font_size,
        )


class OutputSettings(BaseModel):
    directory: Path | None = None
    formats: Annotated[list[OutputFormat], NoDecode] = Field(
        default_factory=lambda: [OutputFormat.PNG]
    )
    font_path: Path | None = None
    bold_font_path: Path | None = None

    @field_validator("formats", mode="before")
    @classmethod
    def normalize_formats(cls, value: object) -> list[str]:
        if value is None:
            return []
        items = value if isinstance(value, list) else [value]
        formats: list[str] = []
        for item in items:
            if isinstance(item, OutputFormat):
                formats.append(item.value)
            else:
                formats.extend(_format_tokens(str(item)))
        return formats


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ANCHORVIZ_", env_nested_delimiter="__")

    layout: LayoutSettings = LayoutSettings()
    output: OutputSettings = OutputSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("ANCHORVIZ_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
