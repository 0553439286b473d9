"""Preset CRUD, apply/match, and import/export endpoints."""

from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from backend import storage
from destiny_start.models import CharacterDraft
from destiny_start.presets.draft import apply_preset, create_preset, find_matching_preset
from destiny_start.presets.store import PresetStore
from destiny_start.presets.transfer import (
    ExportedFile,
    PresetFileError,
    detect_conflicts,
    execute_import,
    export_all_presets,
    export_preset,
    parse_preset_file,
)
from destiny_start.rules import summarize_draft

from .models import ImportBody, LastUsedBody

router = APIRouter()


def _store() -> tuple[PresetStore, list[dict]]:
    """Preset store whose notifications are collected for the response."""
    notes: list[dict] = []
    store = storage.preset_store(
        notify=lambda level, message: notes.append({"level": level, "message": message})
    )
    return store, notes


def _download(exported: ExportedFile) -> Response:
    return Response(
        content=exported.content,
        media_type="application/json; charset=utf-8",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(exported.file_name)}"
        },
    )


@router.get("/presets")
async def list_presets():
    """List presets, most recently updated first."""
    store, _ = _store()
    return [p.to_json_dict() for p in store.list_presets()]


@router.get("/presets-last-used")
async def get_last_used():
    """Name of the last used preset, or null."""
    store, _ = _store()
    return {"name": store.get_last_used()}


@router.put("/presets-last-used")
async def set_last_used(body: LastUsedBody):
    """Point the last-used marker at a preset (or clear it with null)."""
    store, _ = _store()
    if body.name is not None and not store.exists(body.name):
        raise HTTPException(404, "Preset not found")
    store.set_last_used(body.name)
    return {"name": body.name}


@router.post("/presets-match")
async def match_preset(body: CharacterDraft):
    """Find a stored preset identical to the given draft."""
    store, _ = _store()
    return {"name": find_matching_preset(store, body)}


@router.get("/presets-export")
async def export_all():
    """Download every preset as one batch file."""
    store, _ = _store()
    exported = export_all_presets(store)
    if exported is None:
        raise HTTPException(404, "No presets to export")
    return _download(exported)


@router.post("/presets-import/preview")
async def preview_import(body: ImportBody):
    """Validate an import file and report which names collide."""
    store, _ = _store()
    try:
        export_file = parse_preset_file(body.content)
    except PresetFileError as e:
        raise HTTPException(400, str(e))
    conflicts, no_conflicts = detect_conflicts(store, export_file.presets)
    return {
        "type": export_file.type,
        "total": len(export_file.presets),
        "conflicts": [c.preset.name for c in conflicts],
        "new": [p.name for p in no_conflicts],
    }


@router.post("/presets-import")
async def import_presets(body: ImportBody):
    """Import a preset file. Conflicts use body.resolutions[name], default overwrite."""
    store, notes = _store()
    try:
        export_file = parse_preset_file(body.content)
    except PresetFileError as e:
        raise HTTPException(400, str(e))
    conflicts, no_conflicts = detect_conflicts(store, export_file.presets)
    for conflict in conflicts:
        conflict.resolution = body.resolutions.get(conflict.preset.name, conflict.resolution)
    result = execute_import(store, no_conflicts, conflicts)
    return {**result.model_dump(), "summary": result.summary(), "notifications": notes}


@router.get("/presets/{name}")
async def get_preset(name: str):
    """Get a single preset by name."""
    store, _ = _store()
    preset = store.get(name)
    if preset is None:
        raise HTTPException(404, "Preset not found")
    return preset.to_json_dict()


@router.put("/presets/{name}")
async def save_preset(name: str, body: CharacterDraft, overwrite: bool = False):
    """Snapshot a draft as a preset. 409 if the name exists and overwrite is off.

    The response lists rule issues found in the draft; they do not block saving.
    """
    store, notes = _store()
    preset = create_preset(name, body)
    if not store.save(preset, overwrite=overwrite):
        raise HTTPException(409, f"Preset '{name}' already exists")
    return {
        "preset": store.get(name).to_json_dict(),
        "issues": summarize_draft(body).issues,
        "notifications": notes,
    }


@router.delete("/presets/{name}")
async def delete_preset(name: str):
    """Delete a preset by name."""
    store, notes = _store()
    if not store.delete(name):
        raise HTTPException(404, "Preset not found")
    return {"ok": True, "notifications": notes}


@router.post("/presets/{name}/apply")
async def apply_preset_endpoint(name: str):
    """Load a preset into a fresh draft and mark it last used."""
    store, _ = _store()
    preset = store.get(name)
    if preset is None:
        raise HTTPException(404, "Preset not found")
    store.set_last_used(name)
    return apply_preset(preset).to_json_dict()


@router.get("/presets/{name}/export")
async def export_one(name: str):
    """Download a single preset file."""
    store, _ = _store()
    preset = store.get(name)
    if preset is None:
        raise HTTPException(404, "Preset not found")
    return _download(export_preset(preset))
