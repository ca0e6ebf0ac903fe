"""Configuration management for notetemplate."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

from notetemplate.includes import DEFAULT_MAX_PASSES
from notetemplate.logger import get_logger
from notetemplate.paths import resolve_paths_recursively
from notetemplate.renderer import DEFAULT_DOCS_URL
from notetemplate.stages.config import StageConfig, default_stage_configs

logger = get_logger(__name__)

ENV_PREFIX = "NOTETEMPLATE_"


class TemplatingConfig(BaseSettings):
    """Main configuration for the templating engine."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
    )

    # Formatting defaults used by the date and time helpers
    locale: str = Field(default="en-US", description="Locale name exposed to templates")
    date_format: str = Field(
        default="YYYY-MM-DD", description="Default format for date helpers"
    )
    time_format: str = Field(default="h:mm A", description="Default format for time helpers")
    timestamp_format: str = Field(
        default="YYYY-MM-DD h:mm A", description="Format used by date.timestamp()"
    )
    first_day_of_week: int = Field(
        default=0,
        ge=0,
        le=6,
        description="First day of the week, 0 = Sunday through 6 = Saturday",
    )

    # User details exposed through the `user` helper
    user_first_name: str = Field(default="")
    user_last_name: str = Field(default="")
    user_email: str = Field(default="")
    user_phone: str = Field(default="")

    # Template resolution
    templates_dir: Path | None = Field(
        default=None,
        description="Directory searched when templates are referenced by name",
    )
    max_include_passes: int = Field(
        default=DEFAULT_MAX_PASSES,
        ge=1,
        description="Maximum number of include resolution passes per render",
    )
    protect_code_blocks: Literal["all", "ignored", "none"] = Field(
        default="all",
        description="Which fenced code blocks are passed through without rendering: "
        "every block, only blocks marked `template: ignore`, or none",
    )
    docs_url: str = Field(
        default=DEFAULT_DOCS_URL,
        description="Documentation link appended to cleaned error output",
    )

    stages: list[StageConfig] = Field(
        default_factory=default_stage_configs,
        description="Render stages and their configurations",
    )

    _custom_config_file: Path | None = PrivateAttr(default=None)

    def __init__(self, config_file: Path | None = None, **kwargs: Any) -> None:
        if config_file is not None and config_file.exists():
            try:
                with open(config_file, encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Could not load config file {config_file}: {e}")
                config_data = {}

            # Environment variables take priority over the file
            config_data = {
                key: value
                for key, value in config_data.items()
                if f"{ENV_PREFIX}{key}".upper() not in os.environ
            }
            kwargs = {**config_data, **kwargs}

        super().__init__(**kwargs)

        self._custom_config_file = config_file

        if config_file is not None:
            resolve_paths_recursively(self, config_file.parent)

    @property
    def config_file_path(self) -> Path | None:
        return self._custom_config_file

    @property
    def user_full_name(self) -> str:
        return " ".join(
            part for part in (self.user_first_name, self.user_last_name) if part
        )
