"""
Shared fixtures for the extempore effect tests.
"""

import os
import sys
from typing import Dict, List, Tuple

import pytest

# Add the project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from core.character import Character
from core.settings import WorldSettings
from core.state import GameState
from core.effects.condition import builtin_status_effects
from core.effects.manager import ExtemporeEffects
from core.effects.registry import ConditionRegistry
from core.effects.status_config import StatusEffectConfig
from core.effects.system_conditions import SystemConditionStore
from utils.constants import SYS_CUSTOM_COND_SETTING
from utils.i18n import Localizer

SYSTEM_ID = "multiverse-d616"
SCENE_ID = 1001
USER_ID = 42

class InMemorySettingsBackend:
    """Stands in for the Firebase settings tree and records every write"""

    def __init__(self, initial: Dict[str, Dict[str, str]] = None):
        self.data: Dict[str, Dict[str, str]] = initial or {}
        self.writes: List[Tuple[str, str, str]] = []

    async def load_settings(self):
        return self.data

    async def set_setting(self, namespace, key, value):
        self.writes.append((namespace, key, value))
        self.data.setdefault(namespace, {})[key] = value

    def writes_for(self, namespace, key):
        return [w for w in self.writes if w[0] == namespace and w[1] == key]

@pytest.fixture
def backend():
    return InMemorySettingsBackend()

@pytest.fixture
def settings(backend):
    return WorldSettings(backend)

@pytest.fixture
def localizer():
    return Localizer("en")

@pytest.fixture
def registry(settings):
    registry = ConditionRegistry(settings)
    registry.register_setting()
    return registry

@pytest.fixture
def status_config():
    return StatusEffectConfig(
        default_icon=f"systems/{SYSTEM_ID}/icons/m.svg",
        base=builtin_status_effects()
    )

@pytest.fixture
def system_store(settings, localizer):
    settings.register(SYSTEM_ID, SYS_CUSTOM_COND_SETTING, default="[]")
    return SystemConditionStore(settings, SYSTEM_ID, remove_hint=localizer.t("D616EE.RemoveHint"))

@pytest.fixture
def game_state(status_config):
    return GameState(status_config=status_config)

@pytest.fixture
def service(game_state, registry, status_config, system_store, localizer):
    return ExtemporeEffects(game_state, registry, status_config, system_store, localizer, system_id=SYSTEM_ID)

@pytest.fixture
def hero(game_state):
    char = Character(name="Ronan", id="char-ronan")
    game_state.add_character(char)
    return char

@pytest.fixture
def sidekick(game_state):
    char = Character(name="Testman", id="char-testman")
    game_state.add_character(char)
    return char
