"""Storage initialization and path helpers."""

from pathlib import Path

from destiny_start.presets.store import PRESET_STORAGE_FILE, Notify, PresetStore

_data_dir: Path | None = None


def init_storage(data_dir: Path) -> None:
    global _data_dir
    _data_dir = data_dir
    _data_dir.mkdir(parents=True, exist_ok=True)


def data_dir() -> Path:
    assert _data_dir is not None, "Call init_storage() before using storage"
    return _data_dir


def presets_path() -> Path:
    return data_dir() / PRESET_STORAGE_FILE


def preset_store(notify: Notify | None = None) -> PresetStore:
    """PresetStore over the data dir's preset blob."""
    return PresetStore(presets_path(), notify=notify)
