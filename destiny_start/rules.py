"""Character creation rules — stats, level tiers, point pools, costs.

Attribute total per attribute:
  BASE_STAT + tier bonus + basePoints[attr] + attributePoints[attr]

Level tiers (4 levels each, bonus added to every attribute):
  1-4 第一层级 +0 | 5-8 第二层级 +1 | 9-12 第三层级 +2 | 13-16 第四层级 +3
  17-20 第五层级 +4 | 21-24 第六层级 +5 | 25+ 第七层级 +6

Rarity cost ranges bound the cost of catalog entries; "only" (唯一) is a
fixed-cost tier. Destined ones cost a fixed amount per life tier.
Custom entries without a cost are priced automatically (mid-range for
their rarity, or their life tier for destined ones); summarize_draft()
checks a whole draft against these rules.
"""

import math
import random

from pydantic import Field

from .models import (
    ATTRIBUTE_KEYS,
    CamelModel,
    CatalogEntry,
    CharacterConfig,
    CharacterDraft,
    DestinedOne,
)

ATTRIBUTES = list(ATTRIBUTE_KEYS)

BASE_STAT = 4
BASE_AP = 5  # freely-assignable pool (basePoints)
MIN_LEVEL = 1
MAX_LEVEL = 10

INITIAL_REINCARNATION_POINTS = 1000
DEV_REINCARNATION_POINTS = 888888
_DEV_NAME_MARKERS = ("[dev]", "[test]")

TIER_NAMES = [
    "第一层级",
    "第二层级",
    "第三层级",
    "第四层级",
    "第五层级",
    "第六层级",
    "第七层级",
]

# rarity → (min, max) inclusive
RARITY_COST_RANGES: dict[str, tuple[int, int]] = {
    "common": (5, 30),
    "uncommon": (20, 60),
    "rare": (35, 100),
    "epic": (80, 200),
    "legendary": (150, 400),
    "mythic": (300, 1000),
    "only": (666, 666),
}

DESTINED_TOTAL_TIERS = 7
DESTINED_COST_VALUES = [100, 213, 456, 2678, 4642, 8318, 9999]


def _tier_index(level: int) -> int | None:
    if level < 1:
        return None
    return min((level - 1) // 4, len(TIER_NAMES) - 1)


def calculate_ap_by_level(level: int) -> int:
    """Total assignable points at a level: the base pool plus one per level above 1."""
    return BASE_AP + max(0, level - 1)


def get_tier_attribute_bonus(level: int) -> int:
    index = _tier_index(level)
    return 0 if index is None else index


def get_level_tier_name(level: int) -> str:
    index = _tier_index(level)
    return "未知层级" if index is None else TIER_NAMES[index]


def attribute_totals(character: CharacterConfig) -> dict[str, int]:
    """Effective value of each attribute for a character."""
    bonus = get_tier_attribute_bonus(character.level)
    return {
        key: BASE_STAT
        + bonus
        + character.base_points.get(key, 0)
        + character.attribute_points.get(key, 0)
        for key in ATTRIBUTES
    }


def calculate_cost_by_position(rarity: str, position: float = 0.5) -> int:
    """Cost at `position` (0..1) inside the rarity's range."""
    low, high = RARITY_COST_RANGES[rarity]
    return math.floor(low + (high - low) * position + 0.5)


def validate_cost(cost: int, rarity: str) -> bool:
    low, high = RARITY_COST_RANGES[rarity]
    return low <= cost <= high


def get_cost_range(rarity: str) -> str:
    low, high = RARITY_COST_RANGES[rarity]
    return f"{low}-{high}"


def calculate_destined_cost(tier: int) -> int:
    if tier < 1 or tier > DESTINED_TOTAL_TIERS:
        raise ValueError(f"Tier must be between 1 and {DESTINED_TOTAL_TIERS}, got {tier}")
    return DESTINED_COST_VALUES[tier - 1]


def is_dev_name(name: str) -> bool:
    lower = name.lower()
    return any(marker in lower for marker in _DEV_NAME_MARKERS)


def generate_initial_points(
    character_name: str | None = None, rng: random.Random | None = None
) -> int:
    """Roll starting reincarnation points in 1000..10000, weighted toward the low end."""
    if character_name and is_dev_name(character_name):
        return DEV_REINCARNATION_POINTS
    roll = (rng or random).random() ** 3
    return min(int(1000 + roll * (10000 - 1000 + 1)), 10000)


# ---------------------------------------------------------------------------
# Draft summary
# ---------------------------------------------------------------------------

class DraftSummary(CamelModel):
    attribute_totals: dict[str, int]
    available_points: int
    spent_points: int
    reincarnation_points: int
    spent_reincarnation: int
    remaining_reincarnation: int
    issues: list[str] = Field(default_factory=list)


def entry_cost(entry: CatalogEntry) -> int:
    """Cost of an item, skill or equipment; custom entries without one get the mid-range price."""
    if entry.cost or not entry.is_custom or entry.rarity not in RARITY_COST_RANGES:
        return entry.cost
    return calculate_cost_by_position(entry.rarity)


def destined_one_cost(one: DestinedOne) -> int:
    if one.cost or not one.is_custom or one.life_level not in TIER_NAMES:
        return one.cost
    return calculate_destined_cost(TIER_NAMES.index(one.life_level) + 1)


def summarize_draft(draft: CharacterDraft) -> DraftSummary:
    """Attribute totals, point and cost budgets, and rule violations for a draft."""
    character = draft.character
    issues: list[str] = []

    if not MIN_LEVEL <= character.level <= MAX_LEVEL:
        issues.append(f"等级必须在 {MIN_LEVEL} 到 {MAX_LEVEL} 之间")

    available = calculate_ap_by_level(character.level)
    spent_points = sum(character.base_points.values()) + sum(
        character.attribute_points.values()
    )
    if spent_points > available:
        issues.append(f"属性点分配超出上限（{spent_points}/{available}）")

    entries: list[CatalogEntry] = [*draft.equipments, *draft.items, *draft.skills]
    for entry in entries:
        if (
            entry.is_custom
            and entry.cost
            and entry.rarity in RARITY_COST_RANGES
            and not validate_cost(entry.cost, entry.rarity)
        ):
            issues.append(
                f"「{entry.name}」的消耗 {entry.cost} 超出 {entry.rarity} 品质范围"
                f"（{get_cost_range(entry.rarity)}）"
            )
    spent = sum(entry_cost(e) for e in entries) + sum(
        destined_one_cost(o) for o in draft.partners
    )
    remaining = character.reincarnation_points - spent
    if remaining < 0:
        issues.append(f"转生点数不足（需要 {spent}，拥有 {character.reincarnation_points}）")

    if draft.background and not draft.background.is_available_for(character):
        issues.append(f"开局「{draft.background.name}」不适用于当前角色")

    return DraftSummary(
        attribute_totals=attribute_totals(character),
        available_points=available,
        spent_points=spent_points,
        reincarnation_points=character.reincarnation_points,
        spent_reincarnation=spent,
        remaining_reincarnation=remaining,
        issues=issues,
    )
