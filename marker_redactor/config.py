from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OutputLayout = Literal["mirror", "flat"]

DEFAULT_SETTINGS_FILE = Path("~/.config/marker-redactor/settings.json")


class RedactorConfig(BaseModel):
    """User-editable redaction settings.

    Persisted as JSON using the camelCase aliases. Instances are immutable;
    edits go through :class:`~marker_redactor.state.store.ConfigurationStore`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    output_path: str = Field(default="", alias="outputPath")
    mask_symbol: str = Field(default="█", alias="maskSymbol")
    marker: str = Field(default="==", alias="marker")
    shortcut_label: str = Field(default="Ctrl+Shift+R", alias="shortcutLabel")

    @field_validator("mask_symbol", "marker")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("value cannot be empty")
        return v

    def to_persisted(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class Settings(BaseSettings):
    """Runtime configuration for the redactor.

    Values are loaded from environment variables (prefix ``REDACTOR_``) or a
    ``.env`` file and may be overridden via CLI flags.
    """

    # Where the user-editable RedactorConfig is persisted
    settings_file: Path = DEFAULT_SETTINGS_FILE

    # "mirror" keeps the document's relative path under the output root,
    # "flat" keeps only its base name.
    output_layout: OutputLayout = "mirror"

    model_config = SettingsConfigDict(
        env_prefix="REDACTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def resolved_settings_file(self) -> Path:
        return self.settings_file.expanduser()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
