"""Core domain models.

Every model serialises with camelCase aliases, which is the format used
both in the persisted preset blob and in exported preset files:

    CharacterPreset(created_at=...).model_dump(by_alias=True)
    → {"createdAt": ..., "updatedAt": ..., "character": {...}, ...}

Field names are accepted in either form when validating.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CUSTOM_OPTION = "自定义"

ATTRIBUTE_KEYS = ("力量", "敏捷", "体质", "智力", "精神")

Resolution = Literal["overwrite", "rename", "skip"]
ExportType = Literal["single", "batch"]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def empty_attribute_points() -> dict[str, int]:
    return {key: 0 for key in ATTRIBUTE_KEYS}


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ---------------------------------------------------------------------------
# Character
# ---------------------------------------------------------------------------

class CharacterConfig(CamelModel):
    """The player character being created.

    A categorical field set to "自定义" takes its display value from the
    paired custom_* field.
    """

    name: str = ""
    gender: str = ""
    custom_gender: str = ""
    age: int = 18
    race: str = ""
    custom_race: str = ""
    identity: str = ""
    custom_identity: str = ""
    start_location: str = ""
    custom_start_location: str = ""
    level: int = 1
    base_points: dict[str, int] = Field(default_factory=empty_attribute_points)
    attribute_points: dict[str, int] = Field(default_factory=empty_attribute_points)
    reincarnation_points: int = 1000
    destiny_points: int = 0
    money: int = 0

    @staticmethod
    def _display(value: str, custom: str) -> str:
        return custom if value == CUSTOM_OPTION else value

    @property
    def display_gender(self) -> str:
        return self._display(self.gender, self.custom_gender)

    @property
    def display_race(self) -> str:
        return self._display(self.race, self.custom_race)

    @property
    def display_identity(self) -> str:
        return self._display(self.identity, self.custom_identity)

    @property
    def display_start_location(self) -> str:
        return self._display(self.start_location, self.custom_start_location)


# ---------------------------------------------------------------------------
# Catalog entries
# ---------------------------------------------------------------------------

class CatalogEntry(CamelModel):
    """Shared shape of items, skills and equipment.

    is_custom=False marks curated catalog content that is synced to the
    variable store; player-authored entries (True) only reach the prompt.
    """

    name: str = ""
    rarity: str = "common"
    tag: str | list[str] = ""
    effect: str | dict[str, str] = ""
    description: str = ""
    cost: int = 0
    is_custom: bool = False


class Item(CatalogEntry):
    type: str = ""
    quantity: int = 1


class Skill(CatalogEntry):
    type: str = ""
    consume: str = ""


class Equipment(CatalogEntry):
    type: str = ""
    position: str = ""  # equip slot


# ---------------------------------------------------------------------------
# Destined ones (allies)
# ---------------------------------------------------------------------------

class AllyAttributes(CamelModel):
    strength: int = 5
    dexterity: int = 5
    constitution: int = 5
    intelligence: int = 5
    mind: int = 5


class Stairway(CamelModel):
    """Ascension block; elements only matter once is_open is set."""

    is_open: bool = False
    elements: dict[str, str] | None = None


class DestinedOne(CamelModel):
    name: str
    life_level: str = ""
    level: int = 1
    race: str = ""
    identity: list[str] = Field(default_factory=list)
    career: list[str] = Field(default_factory=list)
    personality: str = ""
    like: str = ""
    app: str = ""
    cloth: str = ""
    attributes: AllyAttributes = Field(default_factory=AllyAttributes)
    stairway: Stairway = Field(default_factory=Stairway)
    is_contract: bool = False
    affinity: int = 0
    comment: str = ""
    background_info: str = ""
    equip: list[Equipment] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    cost: int = 0
    is_custom: bool = False


class Background(CamelModel):
    """An opening story seed, optionally limited to a race or location."""

    name: str
    description: str = ""
    required_race: str | None = None
    required_location: str | None = None

    def is_available_for(self, character: CharacterConfig) -> bool:
        if self.required_race and self.required_race != character.display_race:
            return False
        if (
            self.required_location
            and self.required_location != character.display_start_location
        ):
            return False
        return True


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

class CharacterDraft(CamelModel):
    """Live character-creation state: the character plus its selections."""

    character: CharacterConfig = Field(default_factory=CharacterConfig)
    equipments: list[Equipment] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    partners: list[DestinedOne] = Field(default_factory=list)
    background: Background | None = None


class CharacterPreset(CamelModel):
    """A named snapshot of a CharacterDraft. Name is the identity key."""

    name: str
    created_at: int = 0
    updated_at: int = 0
    character: CharacterConfig
    equipments: list[Equipment] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    partners: list[DestinedOne] = Field(default_factory=list)
    background: Background | None = None


class PresetStorage(CamelModel):
    presets: list[CharacterPreset] = Field(default_factory=list)
    last_used_preset: str | None = None


class PresetExportFile(CamelModel):
    version: int
    type: ExportType = "single"
    exported_at: int = Field(default_factory=now_ms)
    presets: list[CharacterPreset] = Field(default_factory=list)


class ImportConflict(CamelModel):
    preset: CharacterPreset
    resolution: Resolution = "overwrite"


class ImportResult(CamelModel):
    imported: int = 0
    skipped: int = 0
    overwritten: int = 0
    renamed: int = 0

    @property
    def total(self) -> int:
        return self.imported + self.skipped + self.overwritten + self.renamed

    def summary(self) -> str:
        """Human-readable outcome, e.g. "成功导入 3 个预设，覆盖 1 个"."""
        written = self.imported + self.overwritten + self.renamed
        if written == 0:
            if self.skipped:
                return f"已跳过所有 {self.skipped} 个冲突预设"
            return "没有导入任何预设"
        parts = [f"成功导入 {written} 个预设"]
        if self.overwritten:
            parts.append(f"覆盖 {self.overwritten} 个")
        if self.renamed:
            parts.append(f"重命名 {self.renamed} 个")
        if self.skipped:
            parts.append(f"跳过 {self.skipped} 个")
        return "，".join(parts)
