"""
Extempore Constants (src/utils/constants.py)

This file contains all constant values used throughout the bot. Centralizing these values
makes it easier to rename settings or namespaces and keeps the context menu, the registry
and the status tray in agreement.

Key Features:
- Setting namespaces and keys
- Status id namespace prefix
- Label patterns used by the chat card extractor
- Emoji mappings for feedback messages

When to Modify:
- Renaming the world settings
- Supporting a new chat card label or section keyword
- Adding new emoji mappings

Dependencies:
- None (this file should only contain constants)
"""

from typing import Dict, List, Tuple

# World setting that holds the extempore conditions (JSON string)
MODULE_ID: str = "extempore-effects"
STORE_SETTING: str = "extemporeConditions"
STORE_DEFAULT: str = "[]"

# Every generated status id starts with this so it never collides with built-in ids
STATUS_PREFIX: str = "d616ee."

# Game system whose custom condition tray mirrors our conditions
DEFAULT_SYSTEM_ID: str = "multiverse-d616"
SYS_CUSTOM_COND_SETTING: str = "customConditions"
SYS_CONDITION_ICON: str = "icons/m.svg"  # relative to system folder

# Slugs and snippet names are capped at this length
MAX_NAME_LENGTH: int = 48
SLUG_FALLBACK: str = "effect"

# Flag keys on a chat card that may point at the item/power that was used
ITEM_FLAG_KEYS: Tuple[str, ...] = ("itemId", "sourceItemId", "originItemId")

# Labelled lines that carry the effect name, in priority order
NAME_LABELS: Tuple[str, ...] = ("power", "item", "trait", "tag")

# Labelled lines dropped from descriptions
DROP_LABELS: Tuple[str, ...] = ("ability",) + NAME_LABELS

# Block elements that end a line when chat HTML is flattened
BLOCK_TAGS: List[str] = ["p", "div", "li", "section", "article", "header", "footer", "tr"]

# Languages with a bundled translation file
SUPPORTED_LANGUAGES: List[str] = ["en", "pt-BR"]
DEFAULT_LANGUAGE: str = "pt-BR"

# Role that counts as Game Master when the member can't manage the guild
DEFAULT_GM_ROLE: str = "GM"

# Emoji mappings for feedback messages
EMOJI_MAP: Dict[str, str] = {
    "apply": "✨",
    "remove": "🧹",
    "remove_all": "🗑️",
    "warning": "⚠️",
    "token": "♟️",
    "select": "🎯",
    "success": "✅",
    "failure": "❌",
}
