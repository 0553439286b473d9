"""Upgrade legacy preset snapshots.

Presets written before the freely-assignable pool ("basePoints") existed
counted 5 extra points inside attributePoints. Migration removes those 5
points and adds an all-zero basePoints for the player to re-spend:

  pass 1  take 1 point from each attribute in ATTRIBUTE_KEYS order,
          skipping attributes already at 0
  pass 2  if points remain, take as much as possible from each attribute
          in the same order

Both functions are pure and never touch their input.
"""

from typing import Any

from destiny_start.models import ATTRIBUTE_KEYS, empty_attribute_points

LEGACY_POINT_OFFSET = 5


def needs_migration(character: dict[str, Any]) -> bool:
    return "basePoints" not in character


def _as_points(value: Any) -> int:
    """Legacy point value as a non-negative int; unreadable values count as 0."""
    if isinstance(value, bool):
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def deduct_legacy_offset(
    attribute_points: dict[str, Any], offset: int = LEGACY_POINT_OFFSET
) -> dict[str, int]:
    points = {key: _as_points(value) for key, value in attribute_points.items()}
    remaining = offset

    for key in ATTRIBUTE_KEYS:
        if remaining <= 0:
            break
        current = points.get(key, 0)
        deduct = min(current, 1)
        points[key] = current - deduct
        remaining -= deduct

    for key in ATTRIBUTE_KEYS:
        if remaining <= 0:
            break
        current = points.get(key, 0)
        deduct = min(current, remaining)
        points[key] = current - deduct
        remaining -= deduct

    return points


def migrate_character(character: dict[str, Any]) -> dict[str, Any]:
    """Return a raw character payload in the current point layout (a new dict if changed)."""
    if not needs_migration(character):
        return character
    migrated = dict(character)
    old_points = character.get("attributePoints")
    if isinstance(old_points, dict):
        migrated["attributePoints"] = deduct_legacy_offset(old_points)
    migrated["basePoints"] = empty_attribute_points()
    return migrated


def migrate_preset(preset: dict[str, Any]) -> dict[str, Any]:
    """Return a raw preset whose character payload is migrated (a new dict if changed)."""
    character = preset.get("character")
    if not isinstance(character, dict) or not needs_migration(character):
        return preset
    return {**preset, "character": migrate_character(character)}
