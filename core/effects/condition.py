"""
Built-in condition definitions.
These seed the status effect list every time the bot (re)builds it; extempore
conditions created from chat are added on top.
"""

from typing import Dict, List, Optional
from enum import Enum

class ConditionType(str, Enum):
    """Built-in condition ids"""
    # Movement Conditions
    PRONE = "prone"
    GRAPPLED = "grappled"
    RESTRAINED = "restrained"
    SLOWED = "slowed"

    # Combat Conditions
    BLINDED = "blinded"
    DEAFENED = "deafened"
    MARKED = "marked"

    # Control Conditions
    INCAPACITATED = "incapacitated"
    PARALYZED = "paralyzed"
    FRIGHTENED = "frightened"

    # State Conditions
    BLEEDING = "bleeding"
    POISONED = "poisoned"
    INVISIBLE = "invisible"

CONDITION_PROPERTIES: Dict[ConditionType, Dict[str, str]] = {
    ConditionType.PRONE: {"emoji": "🔻", "name": "Prone"},
    ConditionType.GRAPPLED: {"emoji": "✋", "name": "Grappled"},
    ConditionType.RESTRAINED: {"emoji": "🕸️", "name": "Restrained"},
    ConditionType.SLOWED: {"emoji": "🐌", "name": "Slowed"},
    ConditionType.BLINDED: {"emoji": "👁️", "name": "Blinded"},
    ConditionType.DEAFENED: {"emoji": "👂", "name": "Deafened"},
    ConditionType.MARKED: {"emoji": "🎯", "name": "Marked"},
    ConditionType.INCAPACITATED: {"emoji": "💫", "name": "Incapacitated"},
    ConditionType.PARALYZED: {"emoji": "⚡", "name": "Paralyzed"},
    ConditionType.FRIGHTENED: {"emoji": "😱", "name": "Frightened"},
    ConditionType.BLEEDING: {"emoji": "🩸", "name": "Bleeding"},
    ConditionType.POISONED: {"emoji": "☠️", "name": "Poisoned"},
    ConditionType.INVISIBLE: {"emoji": "👻", "name": "Invisible"},
}

def condition_emoji(status_id: str) -> Optional[str]:
    """Emoji for a built-in condition id, None for anything else"""
    for condition, props in CONDITION_PROPERTIES.items():
        if condition.value == status_id:
            return props["emoji"]
    return None

def builtin_status_effects(icon_root: str = "icons/svg") -> List[Dict[str, str]]:
    """Status list entries for every built-in condition"""
    entries = []
    for condition, props in CONDITION_PROPERTIES.items():
        icon = f"{icon_root}/{condition.value}.svg"
        entries.append({
            "id": condition.value,
            "name": props["name"],
            "label": props["name"],
            "img": icon,
            "icon": icon,
        })
    return sorted(entries, key=lambda e: e["name"].lower())
