"""
Message Formatting Utilities (src/utils/formatting.py)

This file contains utility functions for formatting messages and embeds in a consistent
way across the bot. All user-facing text formatting should use these utilities.

Key Features:
- Feedback line formatting
- Token and condition list formatting
- Chat card embeds for item use

IMPLEMENTATION MANDATES:
- Condition descriptions are stored as HTML (<br> line breaks); convert before display
- Use EMOJI_MAP for consistent emoji usage
"""

import re
from typing import Dict, List, Optional

from discord import Embed, Color

from core.effects.condition import condition_emoji
from .constants import EMOJI_MAP

class MessageFormatter:
    """Handles consistent message formatting throughout the bot"""

    @staticmethod
    def effect(message: str, emoji: str = "✨") -> str:
        """Format an effect message"""
        if not message.strip().startswith("`"):
            message = f"`{message}`"
        return f"{emoji} {message}"

    @staticmethod
    def bullet(message: str) -> str:
        """Format a bullet point"""
        if not message.strip().startswith("•"):
            message = f"• {message}"
        return message

    @staticmethod
    def notification(level: str, message: str) -> str:
        """Format an info/warn notification"""
        emoji = EMOJI_MAP["warning"] if level == "warn" else EMOJI_MAP["success"]
        return MessageFormatter.effect(message, emoji)

def html_to_discord(text: str) -> str:
    """Stored descriptions use <br> and HTML entities; Discord wants plain text"""
    out = re.sub(r"<br\s*/?>", "\n", text or "", flags=re.IGNORECASE)
    for entity, char in (("&lt;", "<"), ("&gt;", ">"), ("&quot;", "\""), ("&#39;", "'"), ("&amp;", "&")):
        out = out.replace(entity, char)
    return out

def format_token_list(tokens: List) -> str:
    if not tokens:
        return ""
    return "\n".join(MessageFormatter.bullet(f"{EMOJI_MAP['token']} {t.name}") for t in tokens)

def create_status_embed(character, tray: Dict[str, Dict]) -> Embed:
    """Active conditions on a character, with tray tooltips where known"""
    embed = Embed(title=f"{character.name}'s Conditions", color=Color.blue())
    for effect in character.effects:
        if effect.disabled:
            continue
        description = ""
        for status_id in sorted(effect.statuses):
            entry = tray.get(status_id) or {}
            if entry.get("description"):
                description = html_to_discord(entry["description"])
                break
        emoji = next(filter(None, (condition_emoji(s) for s in sorted(effect.statuses))), EMOJI_MAP["apply"])
        embed.add_field(
            name=f"{emoji} {effect.name or ', '.join(sorted(effect.statuses))}",
            value=(description or "—")[:1024],
            inline=False
        )
    return embed

def create_item_card(character_name: str, item_name: str, item_type: str,
                     description: Optional[str] = None) -> Embed:
    """Chat card posted when a character uses an item or power"""
    embed = Embed(title=item_name, description=description or None, color=Color.purple())
    embed.set_author(name=character_name)
    embed.add_field(name=item_type.capitalize(), value=item_name, inline=False)
    return embed
