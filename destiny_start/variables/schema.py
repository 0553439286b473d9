"""Schema version detection for the variable store.

Two layouts exist in the wild:

  V1 — skills at the top level ("技能列表"), currency under "资产.货币".
  V2 — skills under the character ("角色.技能列表"), currency at "货币".

The layout is inferred from the snapshot on every call; stores can be
upgraded between sessions, so nothing is cached.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

from .paths import MISSING, get_path
from .store import LATEST, VariableStore

logger = logging.getLogger(__name__)

V2_MARKER_PATH = "角色.技能列表"


class SchemaVersion(str, Enum):
    V1 = "v1"
    V2 = "v2"


class SchemaPaths(BaseModel):
    """Where each managed section lives for one schema version."""

    model_config = ConfigDict(frozen=True)

    skills: str
    inventory: str
    destined_ones: str
    destiny_points: str
    currency: str

    @property
    def gold(self) -> str:
        return f"{self.currency}.金币"

    @property
    def silver(self) -> str:
        return f"{self.currency}.银币"

    @property
    def copper(self) -> str:
        return f"{self.currency}.铜币"


V1_PATHS = SchemaPaths(
    skills="技能列表",
    inventory="背包",
    destined_ones="命定系统.命定之人",
    destiny_points="命定系统.命运点数",
    currency="资产.货币",
)

V2_PATHS = SchemaPaths(
    skills="角色.技能列表",
    inventory="背包",
    destined_ones="命定系统.命定之人",
    destiny_points="命定系统.命运点数",
    currency="货币",
)

_PATHS = {SchemaVersion.V1: V1_PATHS, SchemaVersion.V2: V2_PATHS}


def paths_for(version: SchemaVersion) -> SchemaPaths:
    return _PATHS[version]


def classify_snapshot(data: dict) -> SchemaVersion:
    """V2 if the V2-only skills path holds a non-null value, else V1."""
    value = get_path(data, V2_MARKER_PATH, MISSING)
    if value is MISSING or value is None:
        return SchemaVersion.V1
    return SchemaVersion.V2


async def detect_schema_version(
    store: VariableStore, message_id: str = LATEST
) -> SchemaVersion:
    await store.wait_ready()
    version = classify_snapshot(await store.get_data(message_id))
    logger.debug("detected variable schema %s for message=%s", version.value, message_id)
    return version
