"""
Character Data Structure (src/core/character.py)

This file defines the Character class (the actor a token represents) and the documents
embedded in it: items the character can use and the active effects currently applied.
Status conditions are active effects tagged with one or more status ids.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Set
import logging
import uuid

logger = logging.getLogger(__name__)

def new_document_id() -> str:
    """Random 16 character id for embedded documents"""
    return uuid.uuid4().hex[:16]

@dataclass
class Item:
    """An item, power or trait owned by a character"""
    id: str
    name: str
    type: str = "power"

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "type": self.type}

    @classmethod
    def from_dict(cls, data: dict) -> 'Item':
        return cls(id=data["id"], name=data["name"], type=data.get("type", "power"))

@dataclass
class ActiveEffect:
    """
    An effect instance attached to a character.
    `statuses` holds the status ids this effect represents.
    """
    id: str
    name: str
    icon: str = ""
    disabled: bool = False
    statuses: Set[str] = field(default_factory=set)

    def has_status(self, status_id: str) -> bool:
        return status_id in self.statuses

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "disabled": self.disabled,
            "statuses": sorted(self.statuses)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ActiveEffect':
        return cls(
            id=data.get("id") or new_document_id(),
            name=data.get("name", ""),
            icon=data.get("icon") or data.get("img") or "",
            disabled=bool(data.get("disabled", False)),
            statuses=set(data.get("statuses") or [])
        )

class Character:
    """
    A persistent game entity. Tokens placed on scenes point back at a character.

    The status configuration is attached by the game state so that
    toggle_status_effect can resolve a status id into a name and icon.
    """

    def __init__(
        self,
        name: str,
        id: Optional[str] = None,
        owner_id: Optional[int] = None,
        items: Optional[Dict[str, Item]] = None,
        effects: Optional[List[ActiveEffect]] = None
    ):
        self.id = id or new_document_id()
        self.name = name
        self.owner_id = owner_id
        self.items: Dict[str, Item] = items or {}
        self.effects: List[ActiveEffect] = effects or []
        self.status_config = None
        self._tokens: List[Any] = []

    def __repr__(self) -> str:
        return f"Character(id={self.id!r}, name={self.name!r})"

    # Items
    def add_item(self, name: str, item_type: str = "power", item_id: Optional[str] = None) -> Item:
        item = Item(id=item_id or new_document_id(), name=name, type=item_type)
        self.items[item.id] = item
        return item

    def get_item(self, item_id: str) -> Optional[Item]:
        return self.items.get(item_id)

    # Tokens
    def get_active_tokens(self) -> List[Any]:
        """Tokens for this character on any scene, in placement order"""
        return list(self._tokens)

    # Embedded effect documents
    def create_embedded_effects(self, effects_data: List[Dict[str, Any]]) -> List[ActiveEffect]:
        created = []
        for data in effects_data:
            effect = ActiveEffect.from_dict(data)
            self.effects.append(effect)
            created.append(effect)
        logger.info(f"Created {len(created)} effect(s) on {self.name}")
        return created

    def delete_embedded_effects(self, effect_ids: List[str]) -> List[ActiveEffect]:
        ids = set(effect_ids)
        removed = [e for e in self.effects if e.id in ids]
        self.effects = [e for e in self.effects if e.id not in ids]
        logger.info(f"Deleted {len(removed)} effect(s) from {self.name}")
        return removed

    def effects_with_status(self, status_id: str, include_disabled: bool = False) -> List[ActiveEffect]:
        return [
            e for e in self.effects
            if e.has_status(status_id) and (include_disabled or not e.disabled)
        ]

    def has_status(self, status_id: str) -> bool:
        return bool(self.effects_with_status(status_id))

    @property
    def statuses(self) -> Set[str]:
        """All status ids currently applied"""
        active: Set[str] = set()
        for effect in self.effects:
            if not effect.disabled:
                active.update(effect.statuses)
        return active

    def toggle_status_effect(self, status_id: str, active: Optional[bool] = None) -> Optional[bool]:
        """
        Turn a status on or off. With active=None the current state is flipped.
        Returns the new state, or None when nothing changed.
        Raises LookupError if the status id is not configured.
        """
        definition = self.status_config.get(status_id) if self.status_config else None
        if definition is None:
            raise LookupError(f"Status '{status_id}' is not configured")

        existing = self.effects_with_status(status_id)
        if active is None:
            active = not existing

        if not active:
            if not existing:
                return None
            self.delete_embedded_effects([e.id for e in existing])
            return False

        if existing:
            return None
        self.create_embedded_effects([{
            "name": definition.get("name") or status_id,
            "icon": definition.get("icon") or definition.get("img") or "",
            "disabled": False,
            "statuses": [status_id]
        }])
        return True

    def to_dict(self) -> dict:
        """Convert character to dictionary for database storage"""
        data = {
            "id": self.id,
            "name": self.name,
            "owner_id": self.owner_id,
            "items": {item_id: item.to_dict() for item_id, item in self.items.items()},
            "effects": [effect.to_dict() for effect in self.effects]
        }
        # Remove None values to save space
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict) -> 'Character':
        """Create a Character instance from stored data"""
        items = {
            item_id: Item.from_dict(item)
            for item_id, item in (data.get("items") or {}).items()
        }
        effects = [ActiveEffect.from_dict(e) for e in (data.get("effects") or [])]
        return cls(
            name=data["name"],
            id=data.get("id"),
            owner_id=data.get("owner_id"),
            items=items,
            effects=effects
        )
