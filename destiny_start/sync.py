"""Write the curated part of a character into the variable store.

One sync pass makes the store's managed sections (skills, inventory
and destined ones) exactly equal to the curated (is_custom=False)
entries, recomputes the three currency totals from curated currency
items, and sets the destiny points:

  1. wait for the store, read the snapshot once, detect its schema
  2. plan an ordered operation list (plan_sync)
       destiny points      set
       each section        delete every existing key, then insert entries
       currency            set 0 for gold/silver/copper, then add amounts
       any non-object container on a written path is first reset to {}
  3. commit the plan with a writer
       DirectWriter  apply in memory, replace the snapshot once
       ScriptWriter  render a script, run it in the store's interpreter,
                     replace the snapshot with the interpreter's result

Writers are chosen per pass from the detected version ("auto": V1 →
direct, V2 → script) unless the caller forces one.

Custom entries never reach the store; they are handled by prompt.py.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Literal, Protocol

from pydantic import BaseModel, Field

from .currency import CURRENCY_ITEM_TYPE, CurrencyAmount, parse_currency, sum_currency
from .models import CharacterConfig, DestinedOne, Equipment, Item, Skill
from .variables.paths import get_path, set_path, split_path
from .variables.schema import SchemaPaths, SchemaVersion, classify_snapshot, paths_for
from .variables.script import ScriptBuilder, ScriptOp, apply_ops, render_script
from .variables.store import LATEST, ScriptRejectedError, VariableStore, VariableStoreError

logger = logging.getLogger(__name__)

WriteMode = Literal["auto", "direct", "script"]

YES = "是"
NO = "否"

DEFAULT_RARITY_LABEL = "普通"
RARITY_LABELS = {
    "common": "普通",
    "uncommon": "优良",
    "rare": "稀有",
    "epic": "史诗",
    "legendary": "传说",
    "mythic": "神话",
    "only": "唯一",
}


def rarity_label(rarity: str | None) -> str:
    return RARITY_LABELS.get(rarity or "", DEFAULT_RARITY_LABEL)


def _flag(value: bool) -> str:
    return YES if value else NO


# ---------------------------------------------------------------------------
# Translation to store records
# ---------------------------------------------------------------------------

def translate_skill(skill: Skill) -> dict[str, Any]:
    return {
        "品质": rarity_label(skill.rarity),
        "类型": skill.type,
        "消耗": skill.consume or "",
        "标签": skill.tag,
        "效果": skill.effect,
        "描述": skill.description,
    }


def translate_item(item: Item) -> dict[str, Any]:
    return {
        "品质": rarity_label(item.rarity),
        "数量": item.quantity or 1,
        "类型": item.type,
        "标签": item.tag,
        "效果": item.effect,
        "描述": item.description,
    }


def translate_equipment(equipment: Equipment) -> dict[str, Any]:
    return {
        "品质": rarity_label(equipment.rarity),
        "类型": equipment.type or "",
        "标签": equipment.tag or "",
        "效果": equipment.effect or "",
        "描述": equipment.description or "",
    }


def translate_destined_one(one: DestinedOne) -> dict[str, Any]:
    stairway: dict[str, Any] = {"是否开启": _flag(one.stairway.is_open)}
    if one.stairway.is_open and one.stairway.elements:
        stairway["要素"] = dict(one.stairway.elements)
    return {
        "是否在场": YES,
        "生命层级": one.life_level,
        "等级": one.level,
        "种族": one.race,
        "身份": list(one.identity),
        "职业": list(one.career),
        "性格": one.personality,
        "喜爱": one.like,
        "外貌特质": one.app,
        "衣物装饰": one.cloth,
        "属性": {
            "力量": one.attributes.strength,
            "敏捷": one.attributes.dexterity,
            "体质": one.attributes.constitution,
            "智力": one.attributes.intelligence,
            "精神": one.attributes.mind,
        },
        "登神长阶": stairway,
        "是否缔结契约": _flag(one.is_contract),
        "好感度": one.affinity,
        "评价": one.comment or "",
        "背景故事": one.background_info or "",
        "装备": {eq.name: translate_equipment(eq) for eq in one.equip if eq.name},
        "技能": {sk.name: translate_skill(sk) for sk in one.skills},
    }


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

class SyncPlan(BaseModel):
    """Ordered operations plus what they will write."""

    ops: list[ScriptOp] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)
    destined_ones: list[str] = Field(default_factory=list)
    currency: CurrencyAmount = CurrencyAmount()


def _ensure_object(builder: ScriptBuilder, view: dict, path: str) -> None:
    """Reset the first non-object value along path to {} so keys can be written under it."""
    parts = split_path(path)
    for depth in range(1, len(parts) + 1):
        prefix = ".".join(parts[:depth])
        value = get_path(view, prefix, None)
        if value is None:
            return
        if not isinstance(value, dict):
            builder.set(prefix, {})
            set_path(view, prefix, {})
            return


def _parent(path: str) -> str | None:
    parent, _, _ = path.rpartition(".")
    return parent or None


def _replace_section(
    builder: ScriptBuilder, view: dict, path: str, entries: dict[str, Any]
) -> None:
    existing = get_path(view, path, None)
    if isinstance(existing, dict):
        for key in existing:
            builder.delete(path, key)
    else:
        _ensure_object(builder, view, path)
    for key, value in entries.items():
        builder.insert(path, key, value)
    if existing is None and not entries:
        builder.set(path, {})


def plan_sync(
    snapshot: dict,
    paths: SchemaPaths,
    character: CharacterConfig,
    items: list[Item],
    skills: list[Skill],
    destined_ones: list[DestinedOne],
) -> SyncPlan:
    """Build the operation list that brings snapshot in line with the character."""
    curated_skills = [s for s in skills if not s.is_custom]
    curated_items = [i for i in items if not i.is_custom]
    curated_ones = [o for o in destined_ones if not o.is_custom]

    bag: dict[str, Any] = {}
    amounts: list[CurrencyAmount] = []
    for item in curated_items:
        if item.type == CURRENCY_ITEM_TYPE:
            amounts.append(parse_currency(item.description))
        else:
            bag[item.name] = translate_item(item)
    currency = sum_currency(amounts)

    # resets are mirrored into view so later sections plan against them
    view = copy.deepcopy(snapshot)
    builder = ScriptBuilder()
    points_parent = _parent(paths.destiny_points)
    if points_parent:
        _ensure_object(builder, view, points_parent)
    builder.set(paths.destiny_points, character.destiny_points)
    _replace_section(
        builder, view, paths.skills, {s.name: translate_skill(s) for s in curated_skills}
    )
    _replace_section(builder, view, paths.inventory, bag)

    _ensure_object(builder, view, paths.currency)
    for path in (paths.gold, paths.silver, paths.copper):
        builder.set(path, 0)
    for amount in amounts:
        for path, value in zip((paths.gold, paths.silver, paths.copper), amount):
            if value:
                builder.add(path, value)

    _replace_section(
        builder,
        view,
        paths.destined_ones,
        {o.name: translate_destined_one(o) for o in curated_ones},
    )

    return SyncPlan(
        ops=builder.ops,
        skills=[s.name for s in curated_skills],
        items=list(bag),
        destined_ones=[o.name for o in curated_ones],
        currency=currency,
    )


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

class SyncWriter(Protocol):
    name: str

    async def commit(
        self, store: VariableStore, snapshot: dict, ops: list[ScriptOp], message_id: str
    ) -> dict: ...


class DirectWriter:
    """Apply operations to the fetched snapshot and replace it in one call."""

    name = "direct"

    async def commit(
        self, store: VariableStore, snapshot: dict, ops: list[ScriptOp], message_id: str
    ) -> dict:
        try:
            data = apply_ops(copy.deepcopy(snapshot), ops)
        except (TypeError, ValueError) as e:
            raise VariableStoreError(f"Cannot apply sync operations: {e}") from e
        await store.replace_data(data, message_id)
        return data


class ScriptWriter:
    """Run the operations as one script in the store's interpreter.

    The interpreter works on the current snapshot; its result replaces the
    store. A falsy result aborts the pass before anything is written.
    """

    name = "script"

    async def commit(
        self, store: VariableStore, snapshot: dict, ops: list[ScriptOp], message_id: str
    ) -> dict:
        script = render_script(ops)
        logger.debug("submitting script lines=%d", len(ops))
        result = await store.run_script(script, snapshot)
        if not result:
            raise ScriptRejectedError("Variable store interpreter rejected the sync script")
        await store.replace_data(result, message_id)
        return result


def select_writer(version: SchemaVersion, mode: WriteMode = "auto") -> SyncWriter:
    if mode == "direct":
        return DirectWriter()
    if mode == "script":
        return ScriptWriter()
    if mode != "auto":
        raise ValueError(f"Unknown write mode: {mode!r}")
    return ScriptWriter() if version == SchemaVersion.V2 else DirectWriter()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

class SyncReport(BaseModel):
    version: SchemaVersion
    strategy: str
    skills: list[str]
    items: list[str]
    destined_ones: list[str]
    currency: dict[str, int]
    operations: int


async def sync_character(
    store: VariableStore,
    character: CharacterConfig,
    items: list[Item],
    skills: list[Skill],
    destined_ones: list[DestinedOne],
    *,
    message_id: str = LATEST,
    mode: WriteMode = "auto",
) -> SyncReport:
    """Replace the store's managed sections with the character's curated data.

    Raises ScriptRejectedError if the interpreter fails (nothing written) and
    VariableStoreError for transport failures. Nothing is retried.
    """
    await store.wait_ready()
    snapshot = await store.get_data(message_id)
    version = classify_snapshot(snapshot)
    plan = plan_sync(snapshot, paths_for(version), character, items, skills, destined_ones)
    writer = select_writer(version, mode)
    await writer.commit(store, snapshot, plan.ops, message_id)
    logger.info(
        "synced character=%s schema=%s strategy=%s ops=%d",
        character.name, version.value, writer.name, len(plan.ops),
    )
    return SyncReport(
        version=version,
        strategy=writer.name,
        skills=plan.skills,
        items=plan.items,
        destined_ones=plan.destined_ones,
        currency=plan.currency._asdict(),
        operations=len(plan.ops),
    )
