"""
Tests for the status effect list: insertion, ordering and reconciliation.
"""

from core.effects.condition import builtin_status_effects
from core.effects.registry import StoredCondition
from core.effects.status_config import StatusEffectConfig

ICON = "systems/multiverse-d616/icons/m.svg"

def test_builtins_seed_the_list(status_config):
    assert "prone" in status_config
    assert len(status_config.entries) == len(builtin_status_effects())

def test_ensure_inserts_with_default_icon(status_config):
    assert status_config.ensure("d616ee.phase-self", "Phase Self") is True
    entry = status_config.get("d616ee.phase-self")
    assert entry == {
        "id": "d616ee.phase-self",
        "name": "Phase Self",
        "label": "Phase Self",
        "img": ICON,
        "icon": ICON
    }

def test_ensure_keeps_existing_entry(status_config):
    status_config.ensure("d616ee.forca", "Força")
    assert status_config.ensure("d616ee.forca", "FORCA") is False
    assert status_config.get("d616ee.forca")["name"] == "Força"
    assert [e["id"] for e in status_config.entries].count("d616ee.forca") == 1

def test_sort_ignores_accents_and_case():
    config = StatusEffectConfig(default_icon=ICON)
    for status_id, name in [("c", "bravo"), ("a", "Ágil"), ("b", "alpha"), ("d", "Zeta")]:
        config.ensure(status_id, name)
    assert [e["name"] for e in config.entries] == ["Ágil", "alpha", "bravo", "Zeta"]

def test_reconcile_accepts_objects_and_dicts(status_config):
    snapshot = [
        StoredCondition(id="d616ee.a", name="A"),
        {"id": "d616ee.b", "name": "B"},
        {"name": "missing id"},
        {"id": "prone", "name": "Prone"}
    ]
    assert status_config.reconcile(snapshot) == 2
    assert status_config.reconcile(snapshot) == 0
    assert "d616ee.a" in status_config and "d616ee.b" in status_config

def test_rebuild_drops_added_entries(status_config):
    status_config.ensure("d616ee.a", "A")
    status_config.rebuild(builtin_status_effects())
    assert "d616ee.a" not in status_config
    assert "prone" in status_config
