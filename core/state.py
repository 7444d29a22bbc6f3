"""
Game State Manager (src/core/state.py)

This file manages the active game state in memory, acting as a cache between the bot
and the database. It tracks characters, the scenes (one per channel) with the tokens
placed on them, which tokens each user currently controls, and flags recorded for chat
cards the bot posted.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple
import logging

from .character import Character, new_document_id

logger = logging.getLogger(__name__)

@dataclass
class Token:
    """A character placed on a scene"""
    id: str
    actor_id: str
    name: str
    scene_id: int
    actor: Optional[Character] = field(default=None, repr=False, compare=False)

    def toggle_status_effect(self, status_id: str, active: Optional[bool] = None) -> Optional[bool]:
        """Token-level toggle; linked tokens share their actor's effects"""
        if self.actor is None:
            raise LookupError(f"Token {self.name} has no actor")
        return self.actor.toggle_status_effect(status_id, active=active)

    def to_dict(self) -> dict:
        return {"id": self.id, "actor_id": self.actor_id, "name": self.name}

@dataclass
class Scene:
    """Tokens placed in one channel"""
    id: int
    name: str = ""
    tokens: Dict[str, Token] = field(default_factory=dict)
    card_flags: Dict[str, Dict[str, Any]] = field(default_factory=dict)  # message id -> system flags

    @property
    def placeables(self) -> List[Token]:
        return list(self.tokens.values())

    def get(self, token_id: str) -> Optional[Token]:
        return self.tokens.get(token_id)

    def find_token(self, name: str) -> Optional[Token]:
        """Find a token by name (case-insensitive)"""
        name_lower = (name or "").strip().lower()
        for token in self.tokens.values():
            if token.name.lower() == name_lower:
                return token
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "tokens": {token_id: token.to_dict() for token_id, token in self.tokens.items()},
            "card_flags": self.card_flags
        }

class GameState:
    """
    Manages the active game state.
    Acts as an in-memory cache to reduce database calls.
    """
    def __init__(self, status_config=None):
        self.characters: Dict[str, Character] = {}
        self.scenes: Dict[int, Scene] = {}
        self.selections: Dict[Tuple[int, int], List[str]] = {}
        self.status_config = status_config
        self.db = None  # Will be set during load

    async def load(self, database) -> None:
        """Load all characters and scenes from database into memory"""
        self.db = database
        try:
            for char_id, data in (await self.db.load_characters()).items():
                try:
                    data.setdefault("id", char_id)
                    self.add_character(Character.from_dict(data))
                except Exception as e:
                    logger.error(f"Error loading character {char_id}: {e}")
                    continue

            for scene_id, data in (await self.db.load_scenes()).items():
                scene = self.get_scene(int(scene_id), create=True)
                scene.name = data.get("name", "")
                scene.card_flags = dict(data.get("card_flags") or {})
                for token_data in (data.get("tokens") or {}).values():
                    character = self.characters.get(token_data.get("actor_id"))
                    if not character:
                        logger.warning(f"Skipping token {token_data.get('name')}: actor missing")
                        continue
                    self._add_token(scene, character, token_data.get("id"), token_data.get("name"))

            logger.info(
                f"Loaded {len(self.characters)} characters and {len(self.scenes)} scenes into game state"
            )

        except Exception as e:
            logger.error(f"Error loading game state: {e}", exc_info=True)
            # Don't raise the error - allow the bot to start without data

    # Characters
    def add_character(self, character: Character) -> None:
        """Add a character to the game state"""
        character.status_config = self.status_config
        self.characters[character.id] = character
        logger.debug(f"Added character {character.name} to game state")

    def get_character(self, name: str) -> Optional[Character]:
        """Get a character by name (case-insensitive)"""
        name_lower = (name or "").strip().lower()
        for character in self.characters.values():
            if character.name.lower() == name_lower:
                return character
        return None

    def get_character_by_id(self, character_id: Optional[str]) -> Optional[Character]:
        if not character_id:
            return None
        return self.characters.get(character_id)

    def get_all_characters(self) -> List[Character]:
        return list(self.characters.values())

    # Scenes and tokens
    def get_scene(self, scene_id: Optional[int], create: bool = False) -> Optional[Scene]:
        if scene_id is None:
            return None
        scene = self.scenes.get(scene_id)
        if scene is None and create:
            scene = Scene(id=scene_id)
            self.scenes[scene_id] = scene
        return scene

    def _add_token(self, scene: Scene, character: Character, token_id: Optional[str] = None,
                   name: Optional[str] = None) -> Token:
        token = Token(
            id=token_id or new_document_id(),
            actor_id=character.id,
            name=name or character.name,
            scene_id=scene.id,
            actor=character
        )
        scene.tokens[token.id] = token
        character._tokens.append(token)
        return token

    def place_token(self, scene_id: int, character: Character) -> Token:
        """Place a token for the character on the scene"""
        scene = self.get_scene(scene_id, create=True)
        token = self._add_token(scene, character)
        logger.info(f"Placed {token.name} on scene {scene_id}")
        return token

    def remove_token(self, scene_id: int, token_id: str) -> Optional[Token]:
        scene = self.get_scene(scene_id)
        if not scene or token_id not in scene.tokens:
            return None
        token = scene.tokens.pop(token_id)
        if token.actor and token in token.actor._tokens:
            token.actor._tokens.remove(token)
        for key, ids in self.selections.items():
            if key[1] == scene_id and token_id in ids:
                ids.remove(token_id)
        return token

    # Selection
    def control_tokens(self, user_id: int, scene_id: int, token_ids: List[str]) -> List[Token]:
        """Replace the user's controlled tokens on a scene"""
        scene = self.get_scene(scene_id)
        if not scene:
            self.selections[(user_id, scene_id)] = []
            return []
        ids = [token_id for token_id in dict.fromkeys(token_ids) if token_id in scene.tokens]
        self.selections[(user_id, scene_id)] = ids
        return [scene.tokens[token_id] for token_id in ids]

    def release_tokens(self, user_id: int, scene_id: int) -> None:
        self.selections.pop((user_id, scene_id), None)

    def controlled_tokens(self, user_id: int, scene_id: Optional[int]) -> List[Token]:
        scene = self.get_scene(scene_id)
        if not scene:
            return []
        return [
            scene.tokens[token_id]
            for token_id in self.selections.get((user_id, scene_id), [])
            if token_id in scene.tokens
        ]

    # Chat card flags
    def record_message_flags(self, scene_id: int, message_id: int, flags: Dict[str, Any]) -> Scene:
        """Remember system flags (e.g. the item used) for a chat card the bot posted"""
        scene = self.get_scene(scene_id, create=True)
        scene.card_flags[str(message_id)] = flags
        return scene

    def get_message_flags(self, scene_id: Optional[int], message_id: int) -> Dict[str, Any]:
        scene = self.get_scene(scene_id)
        if not scene:
            return {}
        return scene.card_flags.get(str(message_id)) or {}

    async def save_character(self, character: Character) -> None:
        if self.db:
            await self.db.save_character(character)

    async def save_scene(self, scene: Scene) -> None:
        if self.db:
            await self.db.save_scene(scene)

    async def save_state(self) -> None:
        """Save current game state to database"""
        if not self.db:
            logger.warning("Cannot save state: database not initialized")
            return

        try:
            for character in self.characters.values():
                await self.db.save_character(character)
            for scene in self.scenes.values():
                await self.db.save_scene(scene)
            logger.info("Game state saved successfully")

        except Exception as e:
            logger.error(f"Error saving game state: {e}", exc_info=True)
