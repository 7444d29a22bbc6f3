"""
Status effect configuration (src/core/effects/status_config.py)

Owns the process-wide list of status effect definitions shown in the token status list.
The bot rebuilds this list from its built-in conditions whenever the gateway session is
re-established, so extempore entries must be re-asserted afterwards.

IMPLEMENTATION MANDATES:
- ensure() never refreshes an entry that is already present (label/icon stay as they are)
- Entries are keyed by id; at most one definition per id
"""

import logging
import unicodedata
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

def _sort_key(entry: Dict[str, Any]) -> str:
    """Base-letter comparison: accents and case are ignored"""
    name = unicodedata.normalize("NFD", str(entry.get("name") or ""))
    return "".join(ch for ch in name if not unicodedata.combining(ch)).casefold()

class StatusEffectConfig:
    """Ordered collection of status definitions {id, name, label, img, icon}"""

    def __init__(self, default_icon: str = "", base: Optional[Iterable[Dict[str, Any]]] = None):
        self.default_icon = default_icon
        self.entries: List[Dict[str, Any]] = []
        if base:
            self.rebuild(base)

    def __contains__(self, status_id: str) -> bool:
        return self.get(status_id) is not None

    def get(self, status_id: str) -> Optional[Dict[str, Any]]:
        for entry in self.entries:
            if entry.get("id") == status_id:
                return entry
        return None

    def rebuild(self, base: Iterable[Dict[str, Any]]) -> None:
        """Replace every definition, dropping anything added since the last rebuild"""
        self.entries = [dict(entry) for entry in base]
        logger.debug(f"Status list rebuilt with {len(self.entries)} entries")

    def ensure(self, status_id: str, name: str, icon: Optional[str] = None) -> bool:
        """
        Add a definition for status_id unless one exists.
        Returns True when an entry was inserted.
        """
        existing = self.get(status_id)
        if existing is not None:
            if existing.get("name") != name:
                logger.debug(f"Status {status_id} keeps stale label '{existing.get('name')}'")
            return False

        icon = icon or self.default_icon
        self.entries.append({
            "id": status_id,
            "name": name,
            "label": name,
            "img": icon,
            "icon": icon
        })

        try:
            self.entries.sort(key=_sort_key)
        except Exception as e:
            logger.warning(f"Could not sort status list: {e}")
        return True

    def reconcile(self, snapshot: Iterable[Any]) -> int:
        """
        Insert every missing entry of a registry snapshot.
        Items may be StoredCondition objects or dicts with id/name.
        Returns how many entries were added.
        """
        added = 0
        for item in snapshot:
            if isinstance(item, dict):
                status_id, name = item.get("id"), item.get("name")
            else:
                status_id, name = getattr(item, "id", None), getattr(item, "name", None)
            if not status_id:
                continue
            if self.ensure(status_id, name or status_id):
                added += 1
        if added:
            logger.info(f"Re-asserted {added} extempore status definition(s)")
        return added
