"""
Extempore Effect Manager (src/core/effects/manager.py)

Creates and removes conditions straight from chat cards:

- apply_from_message: derive name/description, store the condition, mirror it into the
  status list and the system tray, then apply it to the targeted characters
- remove_from_message: remove the card's condition from the targeted characters
- remove_all_from_selection: strip every known extempore condition from the selection

Targets are the user's controlled tokens, else the card speaker's token on the scene,
else every token of the speaking character. Without targets nothing is written.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from utils.constants import DEFAULT_SYSTEM_ID
from .extraction import ChatCard, extract_effect_name, extract_effect_description
from .registry import ConditionRegistry, status_id_for_name
from .status_config import StatusEffectConfig
from .system_conditions import SystemConditionStore
from .toggle import toggle_status, unique_actors_from_tokens

logger = logging.getLogger(__name__)

@dataclass
class Notification:
    """User-facing outcome of an action"""
    level: str  # "info" or "warn"
    message: str

class ExtemporeEffects:
    """Ties the extractor, the registry and the status lists to the game state"""

    def __init__(
        self,
        game_state,
        registry: ConditionRegistry,
        status_config: StatusEffectConfig,
        system_store: SystemConditionStore,
        localizer,
        system_id: str = DEFAULT_SYSTEM_ID
    ):
        self.game_state = game_state
        self.registry = registry
        self.status_config = status_config
        self.system_store = system_store
        self.i18n = localizer
        self.system_id = system_id

    # Reconciliation
    def ensure_all_stored_in_config(self) -> int:
        return self.status_config.reconcile(self.registry.all())

    async def ensure_stored_in_system_custom_conditions(self, is_gm: bool) -> int:
        if not is_gm:
            return 0
        written = 0
        for condition in self.registry.all():
            if await self.system_store.upsert(condition.id, condition.name, condition.description, is_gm):
                written += 1
        return written

    async def sync(self, is_gm: bool) -> None:
        self.ensure_all_stored_in_config()
        await self.ensure_stored_in_system_custom_conditions(is_gm)

    def on_status_list_rebuilt(self, base) -> None:
        """The bot rebuilt its status list; put ours back"""
        self.status_config.rebuild(base)
        self.ensure_all_stored_in_config()

    # Extraction
    def effect_name(self, card: ChatCard) -> str:
        actor = self.game_state.get_character_by_id(card.speaker.actor)
        return extract_effect_name(
            card,
            self.i18n.t("D616EE.NameFallback"),
            actor=actor,
            system_id=self.system_id
        )

    def effect_description(self, card: ChatCard, effect_name: str) -> str:
        return extract_effect_description(card, effect_name, self.i18n.t("D616EE.DescriptionFallback"))

    # Targets
    def get_tokens_for_message(self, card: ChatCard, user_id: int) -> List:
        # 1) Controlled tokens
        controlled = self.game_state.controlled_tokens(user_id, card.scene_id)
        if controlled:
            return controlled

        scene = self.game_state.get_scene(card.scene_id)
        if not scene:
            return []

        # 2) Speaker token in this scene
        if card.speaker.token:
            direct = scene.get(card.speaker.token)
            if direct:
                return [direct]

        # 3) Any token for speaker actor
        if card.speaker.actor:
            matches = [t for t in scene.placeables if t.actor_id == card.speaker.actor]
            if matches:
                return matches

        return []

    async def _toggle_all(self, actors, status_ids, active: bool) -> int:
        calls = 0
        if not status_ids:
            return calls
        names = {c.id: c.name for c in self.registry.all()}
        for actor in actors:
            for status_id in status_ids:
                await toggle_status(
                    actor,
                    status_id,
                    active,
                    status_config=self.status_config,
                    default_icon=self.status_config.default_icon,
                    fallback_name=names.get(status_id)
                )
                calls += 1
            await self.game_state.save_character(actor)
        return calls

    # Actions
    async def apply_from_message(self, card: ChatCard, user_id: int, is_gm: bool) -> Notification:
        tokens = self.get_tokens_for_message(card, user_id)
        if not tokens:
            return Notification("warn", self.i18n.t("D616EE.NoTargets"))

        await self.sync(is_gm)
        name = self.effect_name(card)
        description = self.effect_description(card, name)
        status_id = status_id_for_name(name)

        await self.registry.upsert(status_id, name, description)
        await self.system_store.upsert(status_id, name, description, is_gm)
        self.status_config.ensure(status_id, name)

        await self._toggle_all(unique_actors_from_tokens(tokens), [status_id], True)
        logger.info(f"Applied {status_id} from message {card.id}")
        return Notification("info", self.i18n.t("D616EE.Applied", {"name": name}))

    async def remove_from_message(self, card: ChatCard, user_id: int, is_gm: bool) -> Notification:
        tokens = self.get_tokens_for_message(card, user_id)
        if not tokens:
            return Notification("warn", self.i18n.t("D616EE.NoTargets"))

        await self.sync(is_gm)
        name = self.effect_name(card)
        status_id = status_id_for_name(name)

        await self._toggle_all(unique_actors_from_tokens(tokens), [status_id], False)
        logger.info(f"Removed {status_id} from message {card.id}")
        return Notification("info", self.i18n.t("D616EE.Removed", {"name": name}))

    async def remove_all_from_selection(self, user_id: int, scene_id: Optional[int], is_gm: bool) -> Notification:
        tokens = self.game_state.controlled_tokens(user_id, scene_id)
        if not tokens:
            return Notification("warn", self.i18n.t("D616EE.NoTargets"))

        await self.sync(is_gm)
        ids = self.registry.ids()
        calls = await self._toggle_all(unique_actors_from_tokens(tokens), ids, False)
        logger.info(f"Remove-all issued {calls} toggle(s) on scene {scene_id}")
        return Notification("info", self.i18n.t("D616EE.RemovedAll"))
