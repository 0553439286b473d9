"""Opening-story prompt for custom content.

Curated entries are synced into the variable store (see sync.py); the
player's own items, skills and destined ones only exist in this prompt.
The character block is plain text, wrapped by a Handlebars template that
receives {{{content}}} (triple braces: no HTML escaping).
"""

from collections.abc import Callable
from typing import Any

import pybars

from .currency import format_money
from .models import (
    Background,
    CharacterConfig,
    DestinedOne,
    Equipment,
    Item,
    Skill,
)
from .rules import (
    ATTRIBUTES,
    BASE_STAT,
    attribute_totals,
    get_level_tier_name,
    get_tier_attribute_bonus,
)
from .sync import RARITY_LABELS

DEFAULT_PROMPT_TEMPLATE = """```text
{{{content}}}
```

---
根据<status_current_variables>和以上内容，生成一个符合描述和情景的初始剧情！
（注意：生成初始剧情时，先检查上述内容是否完整，如不完整，必须参考相关设定进行完善，然后再根据内容，在<UpdateVariable>内更新数据。除非有特殊要求，更新的数据不要有任何修改和省略。）
（IMPORTANT: 已在<status_current_variables>内的数据，不得修改和删除）"""

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a prompt template fails to compile or render."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile (cached by source) and render a Handlebars template."""
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


def _rarity(value: str) -> str:
    return RARITY_LABELS.get(value, value)


def _text(value: Any) -> str:
    if isinstance(value, list):
        return "、".join(str(v) for v in value)
    if isinstance(value, dict):
        return "；".join(f"{k}: {v}" for k, v in value.items())
    return str(value)


def _entry_lines(
    entry: Equipment | Item | Skill, indent: str = "  ", name_prefix: str = "- "
) -> list[str]:
    """One catalog entry as "- 名称: ..." followed by its non-empty fields."""
    lines = [f"{indent[:-2]}{name_prefix}名称: {entry.name or '未命名'}"]
    fields: list[tuple[str, Any]] = [
        ("类型", entry.type),
        ("品质", _rarity(entry.rarity) if entry.rarity else ""),
    ]
    if isinstance(entry, Item):
        fields.append(("数量", entry.quantity))
    fields.append(("标签", entry.tag))
    if isinstance(entry, Skill):
        fields.append(("消耗", entry.consume))
    fields += [("效果", entry.effect), ("描述", entry.description)]
    for label, value in fields:
        if value:
            lines.append(f"{indent}{label}: {_text(value)}")
    return lines


def _entry_block(entries: list, indent: str = "  ") -> list[str]:
    lines: list[str] = []
    for index, entry in enumerate(entries):
        if index:
            lines.append("")
        lines.extend(_entry_lines(entry, indent))
    return lines


def _destined_one_lines(one: DestinedOne) -> list[str]:
    lines = [
        f"◆ 名称: {one.name}",
        f"  种族: {one.race}",
        f"  身份: {'、'.join(one.identity)}",
    ]
    if one.career:
        lines.append(f"  职业: {'、'.join(one.career)}")
    lines += [
        f"  生命层级: {one.life_level}",
        f"  等级: {one.level}",
        f"  性格: {one.personality}",
        f"  喜爱: {one.like}",
        f"  外貌: {one.app}",
        f"  衣着: {one.cloth}",
        "  属性:",
        f"    力量: {one.attributes.strength}",
        f"    敏捷: {one.attributes.dexterity}",
        f"    体质: {one.attributes.constitution}",
        f"    智力: {one.attributes.intelligence}",
        f"    精神: {one.attributes.mind}",
        f"  是否缔结契约: {'是' if one.is_contract else '否'}",
        f"  好感度: {one.affinity}",
    ]
    equips = [eq for eq in one.equip if eq.name]
    if equips:
        lines.append("  装备:")
        lines.extend(_entry_block(equips, indent="      "))
    if one.stairway.is_open:
        lines.append("  登神长阶: 已开启")
        description = (one.stairway.elements or {}).get("描述")
        if description:
            lines.append(f"    描述: {description}")
    if one.comment:
        lines.append(f"  评价: {one.comment}")
    if one.background_info:
        lines.append(f"  背景: {one.background_info}")
    if one.skills:
        lines.append("  技能:")
        lines.extend(_entry_block(one.skills, indent="      "))
    return lines


def build_character_block(
    character: CharacterConfig,
    equipments: list[Equipment],
    destined_ones: list[DestinedOne],
    background: Background | None,
    items: list[Item],
    skills: list[Skill],
) -> str:
    tier_bonus = get_tier_attribute_bonus(character.level)
    totals = attribute_totals(character)

    def attribute_line(key: str) -> str:
        base = character.base_points.get(key, 0)
        extra = character.attribute_points.get(key, 0)
        return (
            f"{key}: {BASE_STAT}(基础) + {tier_bonus}(层级) + {base}(分配) "
            f"+ {extra}(额外) = {totals[key]}"
        )

    lines = [
        "【角色信息】",
        f"姓名: {character.name}",
        f"性别: {character.display_gender}",
        f"年龄: {character.age}岁",
        f"种族: {character.display_race}",
        f"身份: {character.display_identity}",
        f"出生地: {character.display_start_location}",
        f"生命层级: {get_level_tier_name(character.level)}",
        f"等级: Lv.{character.level}",
        f"金钱: {format_money(character.money)}",
        "",
        "【角色属性】",
    ]
    lines += [attribute_line(key) for key in ATTRIBUTES]

    sections: list[tuple[str, list[str]]] = [
        ("【装备列表】", _entry_block(equipments)),
        ("【自定义道具】", _entry_block([i for i in items if i.is_custom])),
        ("【自定义技能】", _entry_block([s for s in skills if s.is_custom])),
    ]
    custom_ones = [o for o in destined_ones if o.is_custom]
    if custom_ones:
        ones: list[str] = []
        for one in custom_ones:
            ones.extend(_destined_one_lines(one))
        sections.append(("【命定之人】", ones))
    if background:
        sections.append(
            ("【初始开局剧情】", [background.name, f"描述: {background.description}"])
        )

    for title, body in sections:
        if body:
            lines += ["", title, *body]
    return "\n".join(lines)


def generate_ai_prompt(
    character: CharacterConfig,
    equipments: list[Equipment],
    destined_ones: list[DestinedOne],
    background: Background | None,
    items: list[Item],
    skills: list[Skill],
    template: str = DEFAULT_PROMPT_TEMPLATE,
) -> str:
    content = build_character_block(
        character, equipments, destined_ones, background, items, skills
    )
    return render_prompt(template, {"content": content, "name": character.name})
