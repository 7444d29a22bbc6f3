"""
Tests for mirroring extempore conditions into the system's customConditions setting.
"""

import json

import pytest

from core.effects.system_conditions import SystemConditionStore, parse_json_array
from utils.constants import SYS_CUSTOM_COND_SETTING, SYS_CONDITION_ICON

SYSTEM_ID = "multiverse-d616"

def test_parse_json_array_forms():
    assert parse_json_array("[{\"id\": \"a\"}]") == [{"id": "a"}]
    assert parse_json_array("{\"conditions\": [{\"id\": \"b\"}]}") == [{"id": "b"}]
    assert parse_json_array("{\"other\": 1}") == []
    assert parse_json_array("oops") == []
    assert parse_json_array(None) == []

@pytest.mark.asyncio
async def test_non_gm_never_writes(backend, system_store):
    assert await system_store.upsert("d616ee.a", "A", "desc", is_gm=False) is False
    assert backend.writes == []

@pytest.mark.asyncio
async def test_unregistered_setting_is_skipped(backend, settings):
    store = SystemConditionStore(settings, "some-other-system", remove_hint="hint")
    assert await store.upsert("d616ee.a", "A", "desc", is_gm=True) is False
    assert store.all() == []
    assert backend.writes == []

@pytest.mark.asyncio
async def test_appends_entry_pretty_printed(backend, system_store):
    assert await system_store.upsert("d616ee.a", "A", "Line<br>two", is_gm=True) is True

    (_, _, value), = backend.writes_for(SYSTEM_ID, SYS_CUSTOM_COND_SETTING)
    assert value.startswith("[\n  {")
    assert json.loads(value) == [{
        "id": "d616ee.a",
        "name": "A",
        "icon": SYS_CONDITION_ICON,
        "description": "Line<br>two",
        "remove": system_store.remove_hint
    }]

@pytest.mark.asyncio
async def test_unchanged_entry_is_not_rewritten(backend, system_store):
    await system_store.upsert("d616ee.a", "A", "desc", is_gm=True)
    assert await system_store.upsert("d616ee.a", "A", "desc", is_gm=True) is False
    assert len(backend.writes_for(SYSTEM_ID, SYS_CUSTOM_COND_SETTING)) == 1

@pytest.mark.asyncio
async def test_update_keeps_unknown_keys_and_other_entries(backend, settings, system_store):
    await settings.set(SYSTEM_ID, SYS_CUSTOM_COND_SETTING, json.dumps({"conditions": [
        {"id": "stunned", "name": "Stunned"},
        {"id": "d616ee.a", "name": "Old", "color": "#ff0000"}
    ]}))
    backend.writes.clear()

    assert await system_store.upsert("d616ee.a", "A", "new", is_gm=True) is True

    stored = json.loads(backend.writes_for(SYSTEM_ID, SYS_CUSTOM_COND_SETTING)[-1][2])
    assert stored[0] == {"id": "stunned", "name": "Stunned"}
    assert stored[1]["color"] == "#ff0000"
    assert stored[1]["name"] == "A"
    assert stored[1]["description"] == "new"
    assert [e["id"] for e in system_store.all()] == ["stunned", "d616ee.a"]
