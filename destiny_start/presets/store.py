"""Preset storage — one JSON blob holding every preset.

    {
      "presets": [ {CharacterPreset}, ... ],
      "lastUsedPreset": "name" | null
    }

Every operation reads the whole blob; mutating operations write the whole
blob back. There is no per-preset update at this layer and no locking:
callers are expected to run one mutation at a time.

Legacy presets (no basePoints) are migrated as the blob is read.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from destiny_start.models import CharacterPreset, PresetStorage, now_ms

from .migration import migrate_preset

logger = logging.getLogger(__name__)

# notify(level, message); level is "success" | "info" | "warning" | "error"
Notify = Callable[[str, str], None]

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

PRESET_STORAGE_FILE = "start_presets.json"


class PresetStore:
    def __init__(self, path: Path, notify: Notify | None = None) -> None:
        self._path = path
        self._notify_cb = notify

    @property
    def path(self) -> Path:
        return self._path

    def notify(self, level: str, message: str) -> None:
        logger.log(_LOG_LEVELS.get(level, logging.INFO), message)
        if self._notify_cb is not None:
            self._notify_cb(level, message)

    # ------------------------------------------------------------------
    # Blob I/O
    # ------------------------------------------------------------------

    def load(self) -> PresetStorage:
        """Read the blob. Missing or unreadable blobs load as empty storage."""
        if not self._path.is_file():
            return PresetStorage()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if isinstance(raw, dict) and isinstance(raw.get("presets"), list):
                raw = {
                    **raw,
                    "presets": [
                        migrate_preset(p) if isinstance(p, dict) else p
                        for p in raw["presets"]
                    ],
                }
            return PresetStorage.model_validate(raw)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("unreadable preset storage at %s, using empty storage: %s", self._path, e)
            return PresetStorage()

    def dump(self, storage: PresetStorage) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(storage.model_dump_json(indent=2, by_alias=True), encoding="utf-8")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_presets(self) -> list[CharacterPreset]:
        """All presets, most recently updated first."""
        return sorted(self.load().presets, key=lambda p: p.updated_at, reverse=True)

    def has_presets(self) -> bool:
        return bool(self.load().presets)

    def get(self, name: str) -> CharacterPreset | None:
        for preset in self.load().presets:
            if preset.name == name:
                return preset
        return None

    def exists(self, name: str) -> bool:
        return self.get(name) is not None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save(self, preset: CharacterPreset, overwrite: bool = False) -> bool:
        """Insert a preset, or replace a same-named one when overwrite is set.

        Returns False (storage untouched) if the name exists and overwrite
        is not set. An overwrite keeps the stored created_at. A saved preset
        becomes the last-used preset.
        """
        storage = self.load()
        index = next(
            (i for i, p in enumerate(storage.presets) if p.name == preset.name), None
        )
        now = now_ms()

        if index is not None:
            if not overwrite:
                self.notify("warning", f"预设「{preset.name}」已存在")
                return False
            created_at = storage.presets[index].created_at or preset.created_at
            storage.presets[index] = preset.model_copy(
                update={"created_at": created_at, "updated_at": now}, deep=True
            )
            self.notify("success", f"预设「{preset.name}」已更新")
        else:
            storage.presets.append(
                preset.model_copy(
                    update={"created_at": preset.created_at or now, "updated_at": now},
                    deep=True,
                )
            )
            self.notify("success", f"预设「{preset.name}」已保存")

        storage.last_used_preset = preset.name
        self.dump(storage)
        return True

    def delete(self, name: str) -> bool:
        storage = self.load()
        remaining = [p for p in storage.presets if p.name != name]
        if len(remaining) == len(storage.presets):
            self.notify("error", f"预设「{name}」不存在")
            return False
        storage.presets = remaining
        if storage.last_used_preset == name:
            storage.last_used_preset = None
        self.dump(storage)
        self.notify("info", f"预设「{name}」已删除")
        return True

    def get_last_used(self) -> str | None:
        return self.load().last_used_preset

    def set_last_used(self, name: str | None) -> None:
        storage = self.load()
        storage.last_used_preset = name
        self.dump(storage)
