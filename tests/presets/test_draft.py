"""Tests for destiny_start.presets.draft."""

import random
from pathlib import Path

from destiny_start.models import Background, CharacterConfig, CharacterDraft, Item, Skill
from destiny_start.presets.draft import (
    apply_preset,
    create_preset,
    draft_matches_preset,
    find_matching_preset,
    new_draft,
)
from destiny_start.presets.store import PresetStore
from destiny_start.rules import DEV_REINCARNATION_POINTS


def _draft() -> CharacterDraft:
    return CharacterDraft(
        character=CharacterConfig(name="艾琳", level=3),
        items=[Item(name="火把")],
        skills=[Skill(name="疾风步", rarity="rare")],
        background=Background(name="流亡者"),
    )


def test_create_preset_is_independent_of_draft() -> None:
    draft = _draft()
    preset = create_preset("艾琳", draft)
    draft.items.append(Item(name="绳索"))
    draft.character.level = 9
    assert [i.name for i in preset.items] == ["火把"]
    assert preset.character.level == 3
    assert preset.created_at == preset.updated_at > 0


def test_apply_round_trip() -> None:
    draft = _draft()
    assert apply_preset(create_preset("艾琳", draft)) == draft


def test_apply_raw_legacy_payload() -> None:
    draft = apply_preset({
        "name": "旧",
        "character": {"name": "旧", "attributePoints": {"力量": 5, "敏捷": 5, "体质": 5, "智力": 5, "精神": 5}},
    })
    assert sum(draft.character.attribute_points.values()) == 20
    assert draft.items == []


def test_matches_ignores_timestamps() -> None:
    draft = _draft()
    preset = create_preset("艾琳", draft).model_copy(update={"created_at": 1, "updated_at": 2})
    assert draft_matches_preset(draft, preset)
    draft.skills.clear()
    assert not draft_matches_preset(draft, preset)


def test_find_matching_preset(tmp_path: Path) -> None:
    store = PresetStore(tmp_path / "start_presets.json")
    draft = _draft()
    store.save(create_preset("艾琳", draft))
    assert find_matching_preset(store, draft) == "艾琳"
    draft.character.level = 4
    assert find_matching_preset(store, draft) is None


def test_new_draft_rolls_points() -> None:
    draft = new_draft("艾琳", random.Random(7))
    assert draft.character.name == "艾琳"
    assert 1000 <= draft.character.reincarnation_points <= 10000
    assert draft.items == [] and draft.background is None


def test_new_draft_dev_name() -> None:
    assert new_draft("[test] 艾琳").character.reincarnation_points == DEV_REINCARNATION_POINTS
