import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from marker_redactor.config import RedactorConfig
from marker_redactor.errors import ConfigurationValueError
from marker_redactor.state.store import ConfigurationStore, JsonFileStorage, MemoryStorage

DEFAULTS = {
    "outputPath": "",
    "maskSymbol": "█",
    "marker": "==",
    "shortcutLabel": "Ctrl+Shift+R",
}


def test_load_without_persisted_data_uses_defaults():
    store = ConfigurationStore(MemoryStorage())
    assert store.load().to_persisted() == DEFAULTS


def test_load_merges_partial_data_over_defaults():
    store = ConfigurationStore(MemoryStorage({"maskSymbol": "#"}))
    assert store.load().to_persisted() == {
        "outputPath": "",
        "maskSymbol": "#",
        "marker": "==",
        "shortcutLabel": "Ctrl+Shift+R",
    }


def test_load_accepts_field_names_and_ignores_unknown_keys():
    store = ConfigurationStore(MemoryStorage({"output_path": "out", "colour": "red"}))
    config = store.load()
    assert config.output_path == "out"
    assert config.marker == "=="


def test_load_replaces_invalid_fields_with_defaults(caplog):
    storage = MemoryStorage({"marker": "", "maskSymbol": 5, "outputPath": "redacted"})
    with caplog.at_level(logging.WARNING):
        config = ConfigurationStore(storage).load()
    assert config.marker == "=="
    assert config.mask_symbol == "█"
    assert config.output_path == "redacted"
    assert "settings_invalid_fields" in caplog.text


def test_load_masks_corrupt_file(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        config = ConfigurationStore(JsonFileStorage(path)).load()
    assert config == RedactorConfig()
    assert "settings_unreadable" in caplog.text


def test_load_masks_non_object_json(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert ConfigurationStore(JsonFileStorage(path)).load() == RedactorConfig()


def test_update_persists_immediately():
    storage = MemoryStorage()
    store = ConfigurationStore(storage)
    store.load()
    store.update(maskSymbol="*")
    store.update(output_path="redacted")
    assert storage.saves == 2
    assert storage.data == {**DEFAULTS, "maskSymbol": "*", "outputPath": "redacted"}
    assert store.config.mask_symbol == "*"


def test_update_rejects_invalid_values_and_keeps_config():
    storage = MemoryStorage({"marker": "%%"})
    store = ConfigurationStore(storage)
    store.load()
    with pytest.raises(ConfigurationValueError):
        store.update(marker="")
    with pytest.raises(ConfigurationValueError):
        store.update(colour="red")
    assert store.config.marker == "%%"
    assert storage.saves == 0


def test_reset_restores_defaults():
    storage = MemoryStorage({"maskSymbol": "#"})
    store = ConfigurationStore(storage)
    store.load()
    store.reset()
    assert store.config == RedactorConfig()
    assert storage.data == DEFAULTS


def test_json_file_storage_creates_parents_and_keeps_unicode(tmp_path):
    path = tmp_path / "nested" / "dir" / "settings.json"
    store = ConfigurationStore(JsonFileStorage(path))
    store.load()
    store.update(marker="§§")
    raw = path.read_text(encoding="utf-8")
    assert "█" in raw
    assert json.loads(raw)["marker"] == "§§"
    assert ConfigurationStore(JsonFileStorage(path)).load().marker == "§§"
