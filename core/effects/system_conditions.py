"""
System condition tray integration (src/core/effects/system_conditions.py)

The game system renders condition names and tooltip descriptions from its own world
setting (customConditions), a human-editable JSON document. Extempore conditions are
mirrored into it so they show up in the same tray. Only the GM path writes here.
"""

import json
import logging
from typing import Any, List

from utils.constants import SYS_CUSTOM_COND_SETTING, SYS_CONDITION_ICON

logger = logging.getLogger(__name__)

COMPARED_FIELDS = ("name", "description", "icon", "remove")

def parse_json_array(raw: Any) -> List[Any]:
    """Accepts a JSON array or an object with a `conditions` array"""
    try:
        value = json.loads(str(raw if raw is not None else ""))
    except (TypeError, ValueError):
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, dict) and isinstance(value.get("conditions"), list):
        return value["conditions"]
    return []

class SystemConditionStore:
    """Upserts extempore conditions into the system's customConditions setting"""

    def __init__(self, settings, system_id: str, remove_hint: str, icon: str = SYS_CONDITION_ICON):
        self.settings = settings
        self.system_id = system_id
        self.key = SYS_CUSTOM_COND_SETTING
        self.remove_hint = remove_hint
        self.icon = icon

    def all(self) -> List[Any]:
        try:
            raw = self.settings.get(self.system_id, self.key)
        except KeyError:
            return []
        return parse_json_array(raw)

    async def upsert(self, status_id: str, name: str, description_html: str, is_gm: bool) -> bool:
        """
        Add or update the tray entry for a condition.
        Returns True when the setting was written.
        """
        if not is_gm:
            return False
        try:
            raw = self.settings.get(self.system_id, self.key)
        except KeyError:
            # Game system not present, nothing to mirror into
            return False
        conditions = parse_json_array(raw)

        entry = {
            "id": status_id,
            "name": name,
            "icon": self.icon,
            "description": str(description_html if description_html is not None else ""),
            "remove": self.remove_hint
        }

        for idx, current in enumerate(conditions):
            if not isinstance(current, dict) or str(current.get("id") or "") != status_id:
                continue
            changed = any(
                str(current.get(f) if current.get(f) is not None else "") != entry[f]
                for f in COMPARED_FIELDS
            )
            if not changed:
                return False
            conditions[idx] = {**current, **entry}
            break
        else:
            conditions.append(entry)

        # Pretty-print so the system's manager UI remains readable
        await self.settings.set(self.system_id, self.key, json.dumps(conditions, indent=2, ensure_ascii=False))
        logger.info(f"Synced {status_id} into {self.system_id}.{self.key}")
        return True
