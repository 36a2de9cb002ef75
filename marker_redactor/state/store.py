from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from ..config import RedactorConfig
from ..errors import ConfigurationValueError, ErrorCategory

logger = logging.getLogger(__name__)

# field name and alias both map to the persisted (alias) key
_ALIASES = {name: info.alias or name for name, info in RedactorConfig.model_fields.items()}
_KEYS: dict[str, str] = {**_ALIASES, **{alias: alias for alias in _ALIASES.values()}}


class SettingsStorage(Protocol):
    def load(self) -> dict[str, Any] | None: ...

    def save(self, data: dict[str, Any]) -> None: ...


class MemoryStorage:
    """Keeps persisted settings in a dict."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data = data
        self.saves = 0

    def load(self) -> dict[str, Any] | None:
        return None if self.data is None else dict(self.data)

    def save(self, data: dict[str, Any]) -> None:
        self.data = dict(data)
        self.saves += 1


class JsonFileStorage:
    """Persist settings as a UTF-8 JSON object."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        return json.loads(self.path.read_text(encoding="utf-8"))

    def save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


class ConfigurationStore:
    """Holds the current :class:`RedactorConfig` and persists every edit.

    ``load`` never raises: missing, unreadable or invalid persisted values are
    replaced by their defaults.
    """

    def __init__(self, storage: SettingsStorage) -> None:
        self.storage = storage
        self._config = RedactorConfig()

    @property
    def config(self) -> RedactorConfig:
        return self._config

    def load(self) -> RedactorConfig:
        try:
            raw = self.storage.load()
        except (OSError, ValueError):
            logger.warning(
                "settings_unreadable",
                exc_info=True,
                extra={"error_category": ErrorCategory.CONFIGURATION.value},
            )
            raw = None

        if raw is not None and not isinstance(raw, dict):
            logger.warning(
                "settings_not_an_object",
                extra={"error_category": ErrorCategory.CONFIGURATION.value},
            )
            raw = None

        data = {_KEYS[k]: v for k, v in (raw or {}).items() if k in _KEYS}
        try:
            self._config = RedactorConfig.model_validate(data)
        except ValidationError as e:
            invalid = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            logger.warning(
                "settings_invalid_fields",
                extra={
                    "fields": sorted(invalid),
                    "error_category": ErrorCategory.CONFIGURATION.value,
                },
            )
            data = {k: v for k, v in data.items() if k not in invalid}
            try:
                self._config = RedactorConfig.model_validate(data)
            except ValidationError:
                self._config = RedactorConfig()
        return self._config

    def update(self, **changes: Any) -> RedactorConfig:
        """Apply ``changes`` (by field name or alias) and persist the result."""
        unknown = [k for k in changes if k not in _KEYS]
        if unknown:
            raise ConfigurationValueError(f"unknown setting(s): {', '.join(sorted(unknown))}")

        merged = self._config.to_persisted()
        merged.update({_KEYS[k]: v for k, v in changes.items()})
        try:
            new = RedactorConfig.model_validate(merged)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise ConfigurationValueError(f"invalid value for {fields}") from e

        self.storage.save(new.to_persisted())
        self._config = new
        logger.info("settings_saved", extra={"fields": sorted(_KEYS[k] for k in changes)})
        return new

    def reset(self) -> RedactorConfig:
        new = RedactorConfig()
        self.storage.save(new.to_persisted())
        self._config = new
        return new
