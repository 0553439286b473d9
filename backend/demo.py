"""Create demo presets for development/testing."""

from backend import storage
from destiny_start.models import (
    Background,
    CharacterConfig,
    CharacterDraft,
    DestinedOne,
    Equipment,
    Item,
    Skill,
    Stairway,
)
from destiny_start.presets.draft import create_preset

DEMO_DRAFTS: dict[str, CharacterDraft] = {
    "游侠艾琳": CharacterDraft(
        character=CharacterConfig(
            name="艾琳",
            gender="女",
            age=19,
            race="精灵",
            identity="游侠",
            start_location="翡翠森林",
            level=3,
            base_points={"力量": 0, "敏捷": 3, "体质": 1, "智力": 0, "精神": 1},
            attribute_points={"力量": 0, "敏捷": 2, "体质": 0, "智力": 0, "精神": 0},
            destiny_points=3,
        ),
        equipments=[
            Equipment(
                name="月光长弓",
                type="武器",
                position="主手",
                rarity="rare",
                effect="射程+20%",
                description="以月光树枝制成的长弓。",
            )
        ],
        items=[
            Item(name="治疗药水", type="消耗品", quantity=3, rarity="common", effect="恢复少量生命"),
            Item(name="钱袋", type="货币", rarity="common", description="装着25金币和40银币"),
        ],
        skills=[
            Skill(
                name="疾风步",
                type="主动",
                rarity="rare",
                consume="10法力",
                effect="短时间内移动速度大幅提升",
            )
        ],
        partners=[
            DestinedOne(
                name="赛琳娜",
                life_level="第一层级",
                level=2,
                race="人类",
                identity=["见习骑士"],
                personality="正直",
                stairway=Stairway(is_open=False),
                affinity=20,
                skills=[Skill(name="盾击", type="主动", rarity="common")],
            )
        ],
        background=Background(
            name="森林之子",
            description="你在翡翠森林的边缘醒来，身边只有一张残破的地图。",
            required_race="精灵",
        ),
    ),
    "自定义法师": CharacterDraft(
        character=CharacterConfig(
            name="无名",
            gender="自定义",
            custom_gender="未知",
            race="人类",
            identity="自定义",
            custom_identity="流浪学者",
            start_location="王都",
            level=1,
            base_points={"力量": 0, "敏捷": 0, "体质": 0, "智力": 4, "精神": 1},
        ),
        skills=[
            Skill(
                name="奥术飞弹",
                type="主动",
                rarity="common",
                consume="5法力",
                effect="发射三枚魔法飞弹",
                is_custom=True,
            )
        ],
    ),
}


def create_demo_data() -> None:
    """Replace the preset blob with fresh demo presets."""
    path = storage.presets_path()
    if path.exists():
        path.unlink()
    store = storage.preset_store()
    for name, draft in DEMO_DRAFTS.items():
        store.save(create_preset(name, draft))
