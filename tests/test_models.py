"""Tests for destiny_start.models."""

import pytest
from pydantic import ValidationError

from destiny_start.models import (
    Background,
    CharacterConfig,
    CharacterPreset,
    DestinedOne,
    ImportResult,
    Item,
    PresetStorage,
)


class TestCharacterConfig:
    def test_defaults(self) -> None:
        c = CharacterConfig()
        assert c.level == 1
        assert c.base_points == {"力量": 0, "敏捷": 0, "体质": 0, "智力": 0, "精神": 0}

    def test_custom_display_values(self) -> None:
        c = CharacterConfig(
            gender="自定义", custom_gender="无性",
            race="人类", custom_race="ignored",
            identity="自定义", custom_identity="流浪学者",
            start_location="自定义", custom_start_location="浮空岛",
        )
        assert c.display_gender == "无性"
        assert c.display_race == "人类"
        assert c.display_identity == "流浪学者"
        assert c.display_start_location == "浮空岛"

    def test_camel_case_aliases(self) -> None:
        c = CharacterConfig.model_validate({"customGender": "x", "destinyPoints": 4})
        assert c.custom_gender == "x"
        assert c.destiny_points == 4
        dumped = c.to_json_dict()
        assert "customGender" in dumped
        assert "basePoints" in dumped
        assert "custom_gender" not in dumped


class TestCatalog:
    def test_item_defaults(self) -> None:
        item = Item(name="火把")
        assert item.quantity == 1
        assert item.rarity == "common"
        assert item.is_custom is False

    def test_is_custom_alias(self) -> None:
        item = Item.model_validate({"name": "x", "isCustom": True})
        assert item.is_custom is True

    def test_tag_may_be_list(self) -> None:
        item = Item(name="x", tag=["火", "光"])
        assert item.tag == ["火", "光"]


class TestDestinedOne:
    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            DestinedOne.model_validate({})

    def test_nested_defaults(self) -> None:
        one = DestinedOne(name="赛琳娜")
        assert one.attributes.strength == 5
        assert one.stairway.is_open is False
        assert one.stairway.elements is None


class TestBackground:
    def test_available_without_gates(self) -> None:
        assert Background(name="x").is_available_for(CharacterConfig())

    def test_race_gate_uses_display_race(self) -> None:
        bg = Background(name="x", required_race="龙裔")
        assert bg.is_available_for(CharacterConfig(race="自定义", custom_race="龙裔"))
        assert not bg.is_available_for(CharacterConfig(race="人类"))

    def test_location_gate(self) -> None:
        bg = Background(name="x", required_location="王都")
        assert bg.is_available_for(CharacterConfig(start_location="王都"))
        assert not bg.is_available_for(CharacterConfig(start_location="荒野"))


class TestPresets:
    def test_preset_requires_character(self) -> None:
        with pytest.raises(ValidationError):
            CharacterPreset.model_validate({"name": "A"})

    def test_storage_roundtrip(self) -> None:
        storage = PresetStorage(
            presets=[CharacterPreset(name="A", character=CharacterConfig(name="艾琳"))],
            last_used_preset="A",
        )
        dumped = storage.to_json_dict()
        assert dumped["lastUsedPreset"] == "A"
        assert PresetStorage.model_validate(dumped) == storage


class TestImportResult:
    def test_total(self) -> None:
        r = ImportResult(imported=2, skipped=1, overwritten=3, renamed=4)
        assert r.total == 10

    def test_summary_all_parts(self) -> None:
        r = ImportResult(imported=1, skipped=1, overwritten=1, renamed=1)
        assert r.summary() == "成功导入 3 个预设，覆盖 1 个，重命名 1 个，跳过 1 个"

    def test_summary_only_skipped(self) -> None:
        assert ImportResult(skipped=2).summary() == "已跳过所有 2 个冲突预设"

    def test_summary_nothing(self) -> None:
        assert ImportResult().summary() == "没有导入任何预设"
