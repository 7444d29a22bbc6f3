"""
Extempore condition registry (src/core/effects/registry.py)

Conditions created from chat are remembered in a single world setting holding a JSON
array of {id, name, description}. The registry is only ever added to or field-updated;
nothing here deletes an entry.

IMPLEMENTATION MANDATES:
- A malformed or non-array setting reads as an empty registry, never raises
- upsert() writes only when an entry is added or one of its fields changed
- Status ids are immutable: a new name produces a new id
"""

import json
import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, List

from utils.constants import (
    MODULE_ID, STORE_SETTING, STORE_DEFAULT, STATUS_PREFIX, MAX_NAME_LENGTH, SLUG_FALLBACK
)

logger = logging.getLogger(__name__)

def norm(value: Any) -> str:
    """Strip diacritics, lowercase and trim"""
    text = unicodedata.normalize("NFD", str(value if value is not None else ""))
    text = re.sub(r"[\u0300-\u036f]", "", text)
    return text.lower().strip()

def slugify(value: Any) -> str:
    base = norm(value)
    base = re.sub(r"[^a-z0-9\s-]", "", base)
    base = re.sub(r"\s+", "-", base)
    base = re.sub(r"-+", "-", base)
    base = base.strip("-")
    return base[:MAX_NAME_LENGTH] or SLUG_FALLBACK

def status_id_for_name(name: str) -> str:
    return f"{STATUS_PREFIX}{slugify(name)}"

def safe_json_parse(raw: Any, fallback: Any) -> Any:
    try:
        value = json.loads(str(raw if raw is not None else ""))
    except (TypeError, ValueError):
        return fallback
    return fallback if value is None else value

@dataclass
class StoredCondition:
    id: str
    name: str
    description: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: dict) -> 'StoredCondition':
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description") or "")
        )

class ConditionRegistry:
    """Reads and writes the extempore conditions setting"""

    def __init__(self, settings, namespace: str = MODULE_ID, key: str = STORE_SETTING):
        self.settings = settings
        self.namespace = namespace
        self.key = key

    def register_setting(self) -> None:
        self.settings.register(
            self.namespace,
            self.key,
            name="Extempore Conditions (JSON)",
            hint="Internal storage for extempore effects created from chat.",
            scope="world",
            default=STORE_DEFAULT
        )

    def all(self) -> List[StoredCondition]:
        raw = self.settings.get(self.namespace, self.key)
        data = safe_json_parse(raw, [])
        if not isinstance(data, list):
            return []
        return [
            StoredCondition.from_dict(x)
            for x in data
            if isinstance(x, dict) and x.get("id") and x.get("name")
        ]

    def ids(self) -> List[str]:
        return [condition.id for condition in self.all()]

    async def _save(self, conditions: List[StoredCondition]) -> None:
        await self.settings.set(
            self.namespace,
            self.key,
            json.dumps([c.to_dict() for c in conditions], ensure_ascii=False)
        )

    async def upsert(self, status_id: str, name: str, description: str = "") -> bool:
        """
        Add or update a condition.
        Returns True when the setting was written.
        """
        conditions = self.all()
        desc = str(description if description is not None else "")

        for condition in conditions:
            if condition.id != status_id:
                continue
            if condition.name == name and condition.description == desc:
                return False
            condition.name = name
            condition.description = desc
            await self._save(conditions)
            logger.info(f"Updated extempore condition {status_id}")
            return True

        conditions.append(StoredCondition(id=status_id, name=name, description=desc))
        await self._save(conditions)
        logger.info(f"Stored new extempore condition {status_id} ({name})")
        return True
