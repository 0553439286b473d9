"""Preset import/export.

Export file format (pretty-printed JSON):

    {
      "version": 1,
      "type": "single" | "batch",
      "exportedAt": <epoch ms>,
      "presets": [ {CharacterPreset}, ... ]
    }

Import runs in three steps so a caller can ask the user about conflicts
in between:

    file = parse_preset_file(text)                    # validate, all-or-nothing
    conflicts, fresh = detect_conflicts(store, file.presets)
    ... caller sets conflict.resolution (overwrite / rename / skip) ...
    result = execute_import(store, fresh, conflicts)  # ImportResult counts
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, NamedTuple

from pydantic import ValidationError

from destiny_start.models import (
    CharacterPreset,
    ExportType,
    ImportConflict,
    ImportResult,
    PresetExportFile,
    now_ms,
)

from .migration import migrate_preset
from .store import PresetStore

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1
REQUIRED_PRESET_FIELDS = ("name", "character")


class PresetFileError(ValueError):
    """Raised when an import document is not a valid preset file."""


class ExportedFile(NamedTuple):
    file_name: str
    content: str


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def build_export_file(presets: list[CharacterPreset], kind: ExportType) -> PresetExportFile:
    return PresetExportFile(
        version=EXPORT_VERSION,
        type=kind,
        exported_at=now_ms(),
        presets=[p.model_copy(deep=True) for p in presets],
    )


def serialize_export_file(export: PresetExportFile) -> str:
    return json.dumps(export.to_json_dict(), ensure_ascii=False, indent=2)


def export_preset(preset: CharacterPreset) -> ExportedFile:
    content = serialize_export_file(build_export_file([preset], "single"))
    logger.info("exported preset %s", preset.name)
    return ExportedFile(f"{preset.name}.preset.json", content)


def export_all_presets(store: PresetStore) -> ExportedFile | None:
    """Export every preset as one batch file. None if there is nothing to export."""
    presets = store.list_presets()
    if not presets:
        store.notify("warning", "没有可导出的预设")
        return None
    content = serialize_export_file(build_export_file(presets, "batch"))
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    store.notify("success", f"已导出 {len(presets)} 个预设")
    return ExportedFile(f"所有预设_{date}.presets.json", content)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_preset_file(data: Any) -> PresetExportFile:
    """Check a decoded document and return it as a PresetExportFile.

    Raises PresetFileError with a single message on the first problem found;
    nothing is partially accepted. Legacy presets are migrated here.
    """
    if not isinstance(data, dict):
        raise PresetFileError("导入失败：文件格式不正确")
    if "version" not in data or "presets" not in data:
        raise PresetFileError("导入失败：缺少必要字段（version/presets）")
    if not isinstance(data["presets"], list):
        raise PresetFileError("导入失败：presets 字段格式不正确")

    presets: list[CharacterPreset] = []
    for raw in data["presets"]:
        if not isinstance(raw, dict):
            raise PresetFileError("导入失败：预设格式不正确")
        missing = [field for field in REQUIRED_PRESET_FIELDS if field not in raw]
        if missing:
            raise PresetFileError(f"导入失败：预设缺少必要字段（{', '.join(missing)}）")
        try:
            presets.append(CharacterPreset.model_validate(migrate_preset(raw)))
        except ValidationError as e:
            raise PresetFileError(
                f"导入失败：预设「{raw.get('name')}」数据无效（{e.error_count()} 处错误）"
            ) from e

    try:
        return PresetExportFile(
            version=data["version"],
            type=data.get("type") or "single",
            exported_at=data.get("exportedAt") or now_ms(),
            presets=presets,
        )
    except ValidationError as e:
        raise PresetFileError("导入失败：文件头字段格式不正确") from e


def parse_preset_file(text: str) -> PresetExportFile:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PresetFileError("导入失败：文件不是有效的 JSON") from e
    return validate_preset_file(data)


# ---------------------------------------------------------------------------
# Conflicts and import
# ---------------------------------------------------------------------------

def detect_conflicts(
    store: PresetStore, presets: list[CharacterPreset]
) -> tuple[list[ImportConflict], list[CharacterPreset]]:
    """Split presets into (conflicts, no_conflicts).

    A name already in storage, or repeated earlier in the same import, is a
    conflict. Conflicts default to "overwrite".
    """
    existing = {p.name for p in store.load().presets}
    seen: set[str] = set()
    conflicts: list[ImportConflict] = []
    no_conflicts: list[CharacterPreset] = []
    for preset in presets:
        if preset.name in existing or preset.name in seen:
            conflicts.append(ImportConflict(preset=preset, resolution="overwrite"))
        else:
            no_conflicts.append(preset)
        seen.add(preset.name)
    return conflicts, no_conflicts


def generate_unique_name(store: PresetStore, name: str) -> str:
    """First free "name (n)" for n = 1, 2, ..."""
    suffix = 1
    candidate = f"{name} ({suffix})"
    while store.exists(candidate):
        suffix += 1
        candidate = f"{name} ({suffix})"
    return candidate


def execute_import(
    store: PresetStore,
    no_conflicts: list[CharacterPreset],
    resolved_conflicts: list[ImportConflict],
) -> ImportResult:
    result = ImportResult()

    for preset in no_conflicts:
        store.save(preset, overwrite=False)
        result.imported += 1

    for conflict in resolved_conflicts:
        preset = conflict.preset
        if conflict.resolution == "overwrite":
            store.save(preset, overwrite=True)
            result.overwritten += 1
        elif conflict.resolution == "rename":
            now = now_ms()
            renamed = preset.model_copy(
                update={
                    "name": generate_unique_name(store, preset.name),
                    "created_at": now,
                    "updated_at": now,
                }
            )
            store.save(renamed, overwrite=False)
            result.renamed += 1
        else:
            result.skipped += 1

    if result.imported + result.overwritten + result.renamed:
        store.notify("success", result.summary())
    elif result.skipped:
        store.notify("info", result.summary())
    return result
