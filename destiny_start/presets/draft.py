"""Moving between live character-creation state and presets."""

import random
from collections.abc import Mapping
from typing import Any

from destiny_start.models import CharacterConfig, CharacterDraft, CharacterPreset, now_ms
from destiny_start.rules import generate_initial_points

from .migration import migrate_preset
from .store import PresetStore

_DRAFT_FIELDS = ("equipments", "items", "skills", "partners", "background")


def new_draft(name: str = "", rng: random.Random | None = None) -> CharacterDraft:
    """Blank draft whose reincarnation points are freshly rolled for the name."""
    return CharacterDraft(
        character=CharacterConfig(
            name=name, reincarnation_points=generate_initial_points(name, rng)
        )
    )


def create_preset(name: str, draft: CharacterDraft) -> CharacterPreset:
    """Snapshot a draft under a name. The preset shares no data with the draft."""
    now = now_ms()
    snapshot = draft.model_copy(deep=True)
    return CharacterPreset(
        name=name,
        created_at=now,
        updated_at=now,
        character=snapshot.character,
        equipments=snapshot.equipments,
        items=snapshot.items,
        skills=snapshot.skills,
        partners=snapshot.partners,
        background=snapshot.background,
    )


def apply_preset(preset: CharacterPreset | Mapping[str, Any]) -> CharacterDraft:
    """Build a fresh draft from a preset, migrating raw legacy payloads first."""
    if not isinstance(preset, CharacterPreset):
        preset = CharacterPreset.model_validate(migrate_preset(dict(preset)))
    copied = preset.model_copy(deep=True)
    return CharacterDraft(
        character=copied.character,
        **{field: getattr(copied, field) for field in _DRAFT_FIELDS},
    )


def draft_matches_preset(draft: CharacterDraft, preset: CharacterPreset) -> bool:
    """True if the draft holds exactly the preset's data (timestamps aside)."""
    if draft.character != preset.character:
        return False
    return all(getattr(draft, field) == getattr(preset, field) for field in _DRAFT_FIELDS)


def find_matching_preset(store: PresetStore, draft: CharacterDraft) -> str | None:
    for preset in store.list_presets():
        if draft_matches_preset(draft, preset):
            return preset.name
    return None
