"""Tests for destiny_start.variables.paths."""

import pytest

from destiny_start.variables.paths import (
    MISSING,
    add_at,
    delete_at,
    get_path,
    insert_at,
    set_path,
    split_path,
)


def test_split_path_rejects_empty_segments() -> None:
    assert split_path("a.b") == ["a", "b"]
    for bad in ("", "a..b", ".a", "a."):
        with pytest.raises(ValueError):
            split_path(bad)


def test_get_path_nested() -> None:
    data = {"角色": {"技能列表": {"火球": {}}}}
    assert get_path(data, "角色.技能列表") == {"火球": {}}


def test_get_path_missing_returns_sentinel_or_default() -> None:
    data = {"角色": {}}
    assert get_path(data, "角色.技能列表") is MISSING
    assert get_path(data, "角色.技能列表", None) is None
    assert get_path(data, "a.b.c", 7) == 7


def test_get_path_through_non_dict() -> None:
    assert get_path({"a": 3}, "a.b") is MISSING


def test_get_path_keeps_explicit_none() -> None:
    assert get_path({"a": None}, "a", 5) is None


def test_set_path_creates_levels() -> None:
    data: dict = {}
    set_path(data, "资产.货币.金币", 5)
    assert data == {"资产": {"货币": {"金币": 5}}}


def test_set_path_through_scalar_raises() -> None:
    with pytest.raises(TypeError):
        set_path({"a": 1}, "a.b", 2)


def test_insert_and_delete() -> None:
    data: dict = {}
    insert_at(data, "背包", "长剑.改", {"数量": 1})
    assert data == {"背包": {"长剑.改": {"数量": 1}}}
    assert delete_at(data, "背包", "长剑.改") is True
    assert data == {"背包": {}}
    assert delete_at(data, "背包", "长剑.改") is False
    assert delete_at(data, "不存在", "x") is False


def test_add_at() -> None:
    data = {"货币": {"金币": 3}}
    add_at(data, "货币.金币", 4)
    add_at(data, "货币.银币", 2)
    assert data == {"货币": {"金币": 7, "银币": 2}}


def test_add_at_non_numeric_raises() -> None:
    with pytest.raises(TypeError):
        add_at({"a": "text"}, "a", 1)
    with pytest.raises(TypeError):
        add_at({"a": True}, "a", 1)
