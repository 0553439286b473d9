"""Tests for config storage: defaults, merging, validation and env overrides."""

import pytest

from backend import storage
from destiny_start.prompt import DEFAULT_PROMPT_TEMPLATE


def test_get_config_empty():
    """Returns defaults when no config file exists."""
    config = storage.get_config()
    assert config["variable_store"] == {"url": "", "api_key": "", "timeout": 30}
    assert config["write_strategy"] == "auto"
    assert config["message_id"] == "latest"
    assert config["prompt_template"] == DEFAULT_PROMPT_TEMPLATE


def test_update_variable_store_merges():
    """Partial connection update preserves other keys and persists."""
    storage.update_config({"variable_store": {"url": "http://localhost:8790"}})
    result = storage.update_config({"variable_store": {"api_key": "secret"}})
    assert result["variable_store"] == {
        "url": "http://localhost:8790",
        "api_key": "secret",
        "timeout": 30,
    }
    assert storage.get_config()["variable_store"]["url"] == "http://localhost:8790"


def test_update_write_strategy():
    assert storage.update_config({"write_strategy": "script"})["write_strategy"] == "script"


def test_update_write_strategy_invalid():
    with pytest.raises(ValueError):
        storage.update_config({"write_strategy": "fast"})
    assert storage.get_config()["write_strategy"] == "auto"


def test_message_id_stored_as_string():
    assert storage.update_config({"message_id": 12})["message_id"] == "12"


def test_empty_prompt_template_restores_default():
    storage.update_config({"prompt_template": "{{{content}}}"})
    assert storage.get_config()["prompt_template"] == "{{{content}}}"
    storage.update_config({"prompt_template": ""})
    assert storage.get_config()["prompt_template"] == DEFAULT_PROMPT_TEMPLATE


def test_env_overrides_stored_connection(monkeypatch):
    storage.update_config({"variable_store": {"url": "http://stored", "api_key": "a"}})
    monkeypatch.setenv("VARIABLE_STORE_URL", "http://from-env")
    config = storage.get_config()
    assert config["variable_store"]["url"] == "http://from-env"
    assert config["variable_store"]["api_key"] == "a"
