"""Command scripts for the variable store's interpreter.

A script is an ordered list of operations, one directive per line:

    _.set("命定系统.命运点数", 3);
    _.delete("背包", "旧长剑");
    _.insert("背包", "长剑", {"品质": "稀有", "数量": 1});
    _.add("货币.金币", 12);

Arguments are JSON literals. Operations are kept as typed records
(ScriptOp) so a sync plan can be built once and then either rendered to
text for an interpreter or applied directly to a snapshot.
"""

from __future__ import annotations

import json
import re
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from .paths import add_at, delete_at, insert_at, set_path


class SetOp(BaseModel):
    op: Literal["set"] = "set"
    path: str
    value: Any


class DeleteOp(BaseModel):
    op: Literal["delete"] = "delete"
    path: str
    key: str


class InsertOp(BaseModel):
    op: Literal["insert"] = "insert"
    path: str
    key: str
    value: Any


class AddOp(BaseModel):
    op: Literal["add"] = "add"
    path: str
    delta: int | float


ScriptOp = Annotated[Union[SetOp, DeleteOp, InsertOp, AddOp], Field(discriminator="op")]


class ScriptParseError(ValueError):
    """Raised when script text cannot be parsed into operations."""


class ScriptBuilder:
    """Accumulates operations in the order they must run."""

    def __init__(self) -> None:
        self.ops: list[ScriptOp] = []

    def __len__(self) -> int:
        return len(self.ops)

    def set(self, path: str, value: Any) -> ScriptBuilder:
        self.ops.append(SetOp(path=path, value=value))
        return self

    def delete(self, path: str, key: str) -> ScriptBuilder:
        self.ops.append(DeleteOp(path=path, key=key))
        return self

    def insert(self, path: str, key: str, value: Any) -> ScriptBuilder:
        self.ops.append(InsertOp(path=path, key=key, value=value))
        return self

    def add(self, path: str, delta: int | float) -> ScriptBuilder:
        self.ops.append(AddOp(path=path, delta=delta))
        return self

    def render(self) -> str:
        return render_script(self.ops)


# ---------------------------------------------------------------------------
# Rendering / parsing
# ---------------------------------------------------------------------------

def _lit(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def render_op(op: ScriptOp) -> str:
    if isinstance(op, SetOp):
        args = [_lit(op.path), _lit(op.value)]
    elif isinstance(op, DeleteOp):
        args = [_lit(op.path), _lit(op.key)]
    elif isinstance(op, InsertOp):
        args = [_lit(op.path), _lit(op.key), _lit(op.value)]
    else:
        args = [_lit(op.path), _lit(op.delta)]
    return f"_.{op.op}({', '.join(args)});"


def render_script(ops: list[ScriptOp]) -> str:
    return "\n".join(render_op(op) for op in ops)


_LINE_RE = re.compile(r"^_\.(set|delete|insert|add)\((.*)\);$")

_ARITY = {"set": 2, "delete": 2, "insert": 3, "add": 2}


def parse_script(script: str) -> list[ScriptOp]:
    """Parse script text back into operations. Blank and // lines are ignored."""
    ops: list[ScriptOp] = []
    for lineno, raw in enumerate(script.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("//"):
            continue
        match = _LINE_RE.match(line)
        if not match:
            raise ScriptParseError(f"Line {lineno}: unrecognised directive")
        name, arg_text = match.groups()
        try:
            args = json.loads(f"[{arg_text}]")
        except json.JSONDecodeError as e:
            raise ScriptParseError(f"Line {lineno}: bad arguments ({e.msg})") from e
        if len(args) != _ARITY[name]:
            raise ScriptParseError(
                f"Line {lineno}: {name} takes {_ARITY[name]} arguments, got {len(args)}"
            )
        try:
            if name == "set":
                ops.append(SetOp(path=args[0], value=args[1]))
            elif name == "delete":
                ops.append(DeleteOp(path=args[0], key=args[1]))
            elif name == "insert":
                ops.append(InsertOp(path=args[0], key=args[1], value=args[2]))
            else:
                ops.append(AddOp(path=args[0], delta=args[1]))
        except ValueError as e:
            raise ScriptParseError(f"Line {lineno}: {e}") from e
    return ops


# ---------------------------------------------------------------------------
# Applying
# ---------------------------------------------------------------------------

def apply_op(data: dict, op: ScriptOp) -> None:
    if isinstance(op, SetOp):
        set_path(data, op.path, op.value)
    elif isinstance(op, DeleteOp):
        delete_at(data, op.path, op.key)
    elif isinstance(op, InsertOp):
        insert_at(data, op.path, op.key, op.value)
    else:
        add_at(data, op.path, op.delta)


def apply_ops(data: dict, ops: list[ScriptOp]) -> dict:
    """Apply operations in order, mutating and returning data."""
    for op in ops:
        apply_op(data, op)
    return data
