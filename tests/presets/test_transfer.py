"""Tests for destiny_start.presets.transfer — export, validation and import."""

import json
from pathlib import Path

import pytest

from destiny_start.models import (
    AllyAttributes,
    Background,
    CharacterConfig,
    CharacterPreset,
    DestinedOne,
    Equipment,
    Item,
    Skill,
    Stairway,
)
from destiny_start.presets.store import PresetStore
from destiny_start.presets.transfer import (
    PresetFileError,
    detect_conflicts,
    execute_import,
    export_all_presets,
    export_preset,
    generate_unique_name,
    parse_preset_file,
    validate_preset_file,
)


def _preset(name: str, level: int = 1) -> CharacterPreset:
    return CharacterPreset(name=name, character=CharacterConfig(name=name, level=level))


@pytest.fixture
def notes() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def store(tmp_path: Path, notes) -> PresetStore:
    return PresetStore(tmp_path / "start_presets.json", notify=lambda level, msg: notes.append((level, msg)))


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

class TestExport:
    def test_single(self) -> None:
        exported = export_preset(_preset("游侠"))
        assert exported.file_name == "游侠.preset.json"
        data = json.loads(exported.content)
        assert data["version"] == 1
        assert data["type"] == "single"
        assert data["exportedAt"] > 0
        assert data["presets"][0]["name"] == "游侠"
        assert "游侠" in exported.content  # not ascii-escaped

    def test_all(self, store: PresetStore, notes) -> None:
        store.save(_preset("A"))
        store.save(_preset("B"))
        exported = export_all_presets(store)
        assert exported.file_name.startswith("所有预设_")
        assert exported.file_name.endswith(".presets.json")
        data = json.loads(exported.content)
        assert data["type"] == "batch"
        assert {p["name"] for p in data["presets"]} == {"A", "B"}
        assert notes[-1] == ("success", "已导出 2 个预设")

    def test_all_empty(self, store: PresetStore, notes) -> None:
        assert export_all_presets(store) is None
        assert notes[-1] == ("warning", "没有可导出的预设")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestValidation:
    def test_round_trip(self) -> None:
        original = _preset("游侠", level=7)
        parsed = parse_preset_file(export_preset(original).content)
        assert parsed.presets[0].character == original.character

    def test_invalid_json(self) -> None:
        with pytest.raises(PresetFileError, match="有效的 JSON"):
            parse_preset_file("{nope")

    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ([], "文件格式不正确"),
            ({"presets": []}, "缺少必要字段"),
            ({"version": 1}, "缺少必要字段"),
            ({"version": 1, "presets": {}}, "presets 字段格式不正确"),
            ({"version": 1, "presets": ["x"]}, "预设格式不正确"),
            ({"version": 1, "presets": [{"name": "A"}]}, "预设缺少必要字段（character）"),
            ({"version": 1, "presets": [{"name": "A", "character": {"level": "high"}}]}, "数据无效"),
            ({"version": "one", "presets": []}, "文件头字段格式不正确"),
        ],
    )
    def test_rejections(self, data, message) -> None:
        with pytest.raises(PresetFileError, match=message):
            validate_preset_file(data)

    def test_one_bad_preset_rejects_whole_file(self) -> None:
        good = _preset("A").to_json_dict()
        with pytest.raises(PresetFileError):
            validate_preset_file({"version": 1, "presets": [good, {"name": "B"}]})

    def test_legacy_preset_migrated(self) -> None:
        file = validate_preset_file({
            "version": 1,
            "presets": [{"name": "旧", "character": {"attributePoints": {"力量": 5, "敏捷": 5, "体质": 5, "智力": 5, "精神": 5}}}],
        })
        assert sum(file.presets[0].character.attribute_points.values()) == 20

    def test_legacy_preset_with_string_points(self) -> None:
        file = validate_preset_file({
            "version": 1,
            "presets": [{"name": "旧", "character": {"attributePoints": {"力量": "6", "敏捷": "x", "体质": 4}}}],
        })
        points = file.presets[0].character.attribute_points
        assert points["力量"] == 2 and points["体质"] == 3
        assert points["敏捷"] == 0

    def test_header_defaults(self) -> None:
        file = validate_preset_file({"version": 1, "presets": []})
        assert file.type == "single"
        assert file.exported_at > 0


# ---------------------------------------------------------------------------
# Conflicts and import
# ---------------------------------------------------------------------------

class TestImport:
    def test_detect_conflicts(self, store: PresetStore) -> None:
        store.save(_preset("A"))
        conflicts, fresh = detect_conflicts(store, [_preset("A"), _preset("B"), _preset("B")])
        assert [c.preset.name for c in conflicts] == ["A", "B"]
        assert all(c.resolution == "overwrite" for c in conflicts)
        assert [p.name for p in fresh] == ["B"]

    def test_unique_name(self, store: PresetStore) -> None:
        store.save(_preset("A"))
        assert generate_unique_name(store, "A") == "A (1)"
        store.save(_preset("A (1)"))
        assert generate_unique_name(store, "A") == "A (2)"

    def test_overwrite(self, store: PresetStore) -> None:
        store.save(_preset("A", level=1))
        conflicts, fresh = detect_conflicts(store, [_preset("A", level=5)])
        result = execute_import(store, fresh, conflicts)
        assert result.overwritten == 1
        assert store.get("A").character.level == 5

    def test_rename_after_export(self, store: PresetStore) -> None:
        store.save(_preset("A"))
        file = parse_preset_file(export_preset(store.get("A")).content)
        conflicts, fresh = detect_conflicts(store, file.presets)
        for conflict in conflicts:
            conflict.resolution = "rename"
        result = execute_import(store, fresh, conflicts)
        assert result.renamed == 1
        assert sorted(p.name for p in store.list_presets()) == ["A", "A (1)"]

    def test_skip(self, store: PresetStore, notes) -> None:
        store.save(_preset("A", level=1))
        conflicts, fresh = detect_conflicts(store, [_preset("A", level=5)])
        conflicts[0].resolution = "skip"
        result = execute_import(store, fresh, conflicts)
        assert result.skipped == 1
        assert store.get("A").character.level == 1
        assert notes[-1] == ("info", "已跳过所有 1 个冲突预设")

    def test_counters_sum_to_total(self, store: PresetStore, notes) -> None:
        store.save(_preset("A"))
        store.save(_preset("B"))
        store.save(_preset("C"))
        incoming = [_preset(n) for n in ("A", "B", "C", "D", "E")]
        conflicts, fresh = detect_conflicts(store, incoming)
        for conflict, resolution in zip(conflicts, ("overwrite", "rename", "skip")):
            conflict.resolution = resolution
        result = execute_import(store, fresh, conflicts)
        assert (result.imported, result.overwritten, result.renamed, result.skipped) == (2, 1, 1, 1)
        assert result.total == len(incoming)
        assert notes[-1] == ("success", "成功导入 4 个预设，覆盖 1 个，重命名 1 个，跳过 1 个")

    def test_repeated_name_in_file_renamed(self, store: PresetStore) -> None:
        conflicts, fresh = detect_conflicts(store, [_preset("A", level=1), _preset("A", level=2)])
        conflicts[0].resolution = "rename"
        result = execute_import(store, fresh, conflicts)
        assert result.total == 2
        assert store.get("A").character.level == 1
        assert store.get("A (1)").character.level == 2

    def test_full_preset_survives_export_and_import(self, store: PresetStore) -> None:
        original = CharacterPreset(
            name="艾琳",
            created_at=1000,
            updated_at=2000,
            character=CharacterConfig(
                name="艾琳",
                gender="自定义",
                custom_gender="无",
                race="精灵",
                level=6,
                base_points={"力量": 2, "敏捷": 1, "体质": 1, "智力": 1, "精神": 0},
                attribute_points={"力量": 0, "敏捷": 3, "体质": 0, "智力": 2, "精神": 0},
                reincarnation_points=3210,
                destiny_points=4,
                money=15000,
            ),
            equipments=[Equipment(name="银叶弓", rarity="rare", position="主手", tag=["远程", "弓"])],
            items=[
                Item(name="钱袋", type="货币", description="12金币5银币"),
                Item(name="自制药剂", quantity=3, is_custom=True, cost=12),
            ],
            skills=[Skill(name="疾风步", rarity="epic", effect={"速度": "+2"}, consume="10法力")],
            partners=[
                DestinedOne(
                    name="莉娅",
                    life_level="第二层级",
                    identity=["向导"],
                    attributes=AllyAttributes(strength=7),
                    stairway=Stairway(is_open=True, elements={"火": "初醒"}),
                    is_contract=True,
                    affinity=40,
                    equip=[Equipment(name="短刀")],
                    skills=[Skill(name="潜行")],
                    cost=213,
                )
            ],
            background=Background(name="流亡者", description="逃离王都", required_race="精灵"),
        )
        file = parse_preset_file(export_preset(original).content)
        conflicts, fresh = detect_conflicts(store, file.presets)
        result = execute_import(store, fresh, conflicts)
        assert (result.imported, result.total) == (1, 1)
        timestamps = {"created_at", "updated_at"}
        assert store.get("艾琳").model_dump(exclude=timestamps) == original.model_dump(exclude=timestamps)
