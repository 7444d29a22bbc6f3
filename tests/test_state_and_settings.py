"""
Tests for world settings, the game state cache and localization.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from core.character import ActiveEffect, Character
from core.database import Database
from core.state import GameState
from utils.i18n import LANG_DIR, Localizer

SCENE_ID = 1001
USER_ID = 42

class TestWorldSettings:
    def test_unregistered_raises(self, settings):
        with pytest.raises(KeyError):
            settings.get("nope", "missing")

    def test_default_until_set(self, settings):
        settings.register("mod", "key", default="[]")
        assert settings.is_registered("mod", "key")
        assert settings.get("mod", "key") == "[]"

    @pytest.mark.asyncio
    async def test_set_writes_through(self, backend, settings):
        settings.register("mod", "key", default="[]")
        await settings.set("mod", "key", "[1]")
        assert settings.get("mod", "key") == "[1]"
        assert backend.writes == [("mod", "key", "[1]")]

    @pytest.mark.asyncio
    async def test_set_unregistered_raises(self, backend, settings):
        with pytest.raises(KeyError):
            await settings.set("mod", "key", "x")
        assert backend.writes == []

    @pytest.mark.asyncio
    async def test_load_fills_cache(self, backend, settings):
        backend.data = {"mod": {"key": "[2]"}, "junk": "not a dict"}
        settings.register("mod", "key", default="[]")
        await settings.load()
        assert settings.get("mod", "key") == "[2]"

class TestGameState:
    def test_place_and_remove_token(self, game_state, hero):
        token = game_state.place_token(SCENE_ID, hero)
        scene = game_state.get_scene(SCENE_ID)

        assert scene.find_token("ronan") is token
        assert hero.get_active_tokens() == [token]

        game_state.control_tokens(USER_ID, SCENE_ID, [token.id])
        assert game_state.remove_token(SCENE_ID, token.id) is token
        assert scene.placeables == []
        assert hero.get_active_tokens() == []
        assert game_state.controlled_tokens(USER_ID, SCENE_ID) == []

    def test_control_ignores_unknown_and_duplicate_ids(self, game_state, hero, sidekick):
        a = game_state.place_token(SCENE_ID, hero)
        b = game_state.place_token(SCENE_ID, sidekick)

        controlled = game_state.control_tokens(USER_ID, SCENE_ID, [b.id, "ghost", a.id, b.id])

        assert controlled == [b, a]
        assert game_state.controlled_tokens(USER_ID, SCENE_ID) == [b, a]
        game_state.release_tokens(USER_ID, SCENE_ID)
        assert game_state.controlled_tokens(USER_ID, SCENE_ID) == []

    def test_selection_is_per_scene(self, game_state, hero):
        token = game_state.place_token(SCENE_ID, hero)
        game_state.place_token(2002, hero)
        game_state.control_tokens(USER_ID, SCENE_ID, [token.id])
        assert game_state.controlled_tokens(USER_ID, 2002) == []
        assert game_state.controlled_tokens(USER_ID, None) == []

    def test_lookup_helpers(self, game_state, hero):
        assert game_state.get_character("RONAN") is hero
        assert game_state.get_character_by_id("char-ronan") is hero
        assert game_state.get_character_by_id(None) is None
        assert hero.status_config is game_state.status_config

    def test_message_flags_live_on_the_scene(self, game_state):
        scene = game_state.record_message_flags(SCENE_ID, 9, {"multiverse-d616": {"itemId": "x"}})

        assert game_state.get_message_flags(SCENE_ID, 9)["multiverse-d616"]["itemId"] == "x"
        assert game_state.get_message_flags(SCENE_ID, 10) == {}
        assert game_state.get_message_flags(2002, 9) == {}
        assert scene.to_dict()["card_flags"] == {"9": {"multiverse-d616": {"itemId": "x"}}}

    @pytest.mark.asyncio
    async def test_load_restores_tokens(self, status_config):
        hero = Character(name="Ronan", id="c1")
        hero.effects.append(ActiveEffect(id="e1", name="Prone", statuses={"prone"}))
        db = Mock()
        db.load_characters = AsyncMock(return_value={"c1": hero.to_dict()})
        db.load_scenes = AsyncMock(return_value={
            str(SCENE_ID): {
                "name": "tavern",
                "card_flags": {"77": {"multiverse-d616": {"itemId": "i1"}}},
                "tokens": {
                    "t1": {"id": "t1", "actor_id": "c1", "name": "Ronan"},
                    "t2": {"id": "t2", "actor_id": "missing", "name": "Ghost"}
                }
            }
        })

        state = GameState(status_config=status_config)
        await state.load(db)

        loaded = state.get_character_by_id("c1")
        assert loaded.statuses == {"prone"}
        scene = state.get_scene(SCENE_ID)
        assert [t.id for t in scene.placeables] == ["t1"]
        assert scene.get("t1").actor is loaded
        # Cards posted before a restart still resolve their item
        assert state.get_message_flags(SCENE_ID, 77) == {"multiverse-d616": {"itemId": "i1"}}

    @pytest.mark.asyncio
    async def test_save_character_uses_db(self, game_state, hero):
        await game_state.save_character(hero)  # no db yet
        game_state.db = Mock(save_character=AsyncMock())
        await game_state.save_character(hero)
        game_state.db.save_character.assert_awaited_once_with(hero)

def test_character_round_trip_keeps_effects():
    char = Character(name="Ronan", id="c1", owner_id=7)
    char.add_item("Phase Self", item_id="i1")
    char.create_embedded_effects([{"name": "Phase Self", "statuses": ["d616ee.phase-self"]}])

    restored = Character.from_dict(char.to_dict())

    assert restored.get_item("i1").name == "Phase Self"
    assert restored.has_status("d616ee.phase-self")
    assert restored.owner_id == 7

class TestLocalizer:
    def test_placeholders(self):
        i18n = Localizer("en")
        assert i18n.t("D616EE.Applied", {"name": "Phase Self"}) == "Effect applied: Phase Self"
        assert i18n.t("D616EE.Applied") == "Effect applied: {name}"

    def test_missing_key_returns_key(self):
        assert Localizer("en").t("D616EE.Nope") == "D616EE.Nope"

    def test_unsupported_language_falls_back(self):
        i18n = Localizer("xx")
        assert i18n.lang == "pt-BR"
        assert i18n.t("D616EE.NameFallback") == "Efeito Extempore"

    def test_translations_ship_inside_utils_package(self):
        import utils.i18n

        assert LANG_DIR.parent == Path(utils.i18n.__file__).resolve().parent
        assert {p.name for p in LANG_DIR.glob("*.json")} >= {"en.json", "pt-BR.json"}

    def test_languages_share_keys(self):
        keys = [set(json.loads((LANG_DIR / f"{code}.json").read_text(encoding="utf-8"))) for code in ("en", "pt-BR")]
        assert keys[0] == keys[1]

def test_database_exposes_only_what_the_bot_calls():
    public = {name for name in vars(Database) if not name.startswith("_")}
    assert public == {
        "initialize", "load_settings", "set_setting",
        "save_character", "load_characters", "save_scene", "load_scenes"
    }
