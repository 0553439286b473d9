"""App configuration (variable store connection, write strategy, prompt template)."""

import json
import os
from pathlib import Path
from typing import Any

from destiny_start.prompt import DEFAULT_PROMPT_TEMPLATE

from .core import data_dir

WRITE_STRATEGIES = ("auto", "direct", "script")

_CONFIG_DEFAULTS: dict[str, Any] = {
    "variable_store": {
        "url": "",
        "api_key": "",
        "timeout": 30,
    },
    "write_strategy": "auto",
    "message_id": "latest",
    "prompt_template": DEFAULT_PROMPT_TEMPLATE,
}


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config: defaults, then stored values, then environment overrides.

    VARIABLE_STORE_URL / VARIABLE_STORE_API_KEY override the stored
    connection so deployments can be configured from .env.
    """
    config: dict[str, Any] = {
        "variable_store": dict(_CONFIG_DEFAULTS["variable_store"]),
        "write_strategy": _CONFIG_DEFAULTS["write_strategy"],
        "message_id": _CONFIG_DEFAULTS["message_id"],
        "prompt_template": _CONFIG_DEFAULTS["prompt_template"],
    }
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(stored.get("variable_store"), dict):
            config["variable_store"].update(stored["variable_store"])
        if stored.get("write_strategy") in WRITE_STRATEGIES:
            config["write_strategy"] = stored["write_strategy"]
        if "message_id" in stored:
            config["message_id"] = str(stored["message_id"])
        if stored.get("prompt_template"):
            config["prompt_template"] = stored["prompt_template"]
    if os.getenv("VARIABLE_STORE_URL"):
        config["variable_store"]["url"] = os.environ["VARIABLE_STORE_URL"]
    if os.getenv("VARIABLE_STORE_API_KEY"):
        config["variable_store"]["api_key"] = os.environ["VARIABLE_STORE_API_KEY"]
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into stored config and persist. Returns full config.

    variable_store is merged key-by-key; unknown write strategies raise
    ValueError; an empty prompt_template restores the default.
    """
    stored: dict[str, Any] = {}
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text(encoding="utf-8"))
    if "variable_store" in fields:
        stored.setdefault("variable_store", {}).update(fields["variable_store"])
    if "write_strategy" in fields:
        if fields["write_strategy"] not in WRITE_STRATEGIES:
            raise ValueError(f"Unknown write strategy: {fields['write_strategy']!r}")
        stored["write_strategy"] = fields["write_strategy"]
    if "message_id" in fields:
        stored["message_id"] = str(fields["message_id"])
    if "prompt_template" in fields:
        if fields["prompt_template"]:
            stored["prompt_template"] = fields["prompt_template"]
        else:
            stored.pop("prompt_template", None)
    path.write_text(json.dumps(stored, indent=2, ensure_ascii=False), encoding="utf-8")
    return get_config()
