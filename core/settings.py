"""
World Settings (src/core/settings.py)

String-valued, world-scoped settings keyed by (namespace, key). Reads are served from an
in-memory cache filled at startup; writes go straight through to the database backend.
Last write wins: there is no locking around read-modify-write cycles.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

@dataclass
class SettingConfig:
    """Registration info for one setting"""
    namespace: str
    key: str
    name: str = ""
    hint: str = ""
    scope: str = "world"
    default: str = ""

class WorldSettings:
    """
    Registry of world settings backed by the database.

    The backend only needs `load_settings()` and `set_setting(namespace, key, value)`
    coroutines (see core.database.Database).
    """

    def __init__(self, backend=None):
        self.backend = backend
        self._registered: Dict[Tuple[str, str], SettingConfig] = {}
        self._values: Dict[Tuple[str, str], str] = {}

    def register(self, namespace: str, key: str, **options) -> SettingConfig:
        """Register a setting so it can be read and written"""
        config = SettingConfig(namespace=namespace, key=key, **options)
        self._registered[(namespace, key)] = config
        logger.debug(f"Registered setting {namespace}.{key}")
        return config

    def is_registered(self, namespace: str, key: str) -> bool:
        return (namespace, key) in self._registered

    async def load(self) -> None:
        """Fill the cache from the backend"""
        if not self.backend:
            return
        stored = await self.backend.load_settings()
        for namespace, values in (stored or {}).items():
            if not isinstance(values, dict):
                continue
            for key, value in values.items():
                self._values[(namespace, key)] = value
        logger.info(f"Loaded {len(self._values)} world settings")

    def get(self, namespace: str, key: str) -> Optional[str]:
        """
        Return the stored value, or the registered default.
        Raises KeyError for settings nobody registered.
        """
        config = self._registered.get((namespace, key))
        if config is None:
            raise KeyError(f"{namespace}.{key} is not a registered setting")
        return self._values.get((namespace, key), config.default)

    async def set(self, namespace: str, key: str, value: str) -> str:
        if (namespace, key) not in self._registered:
            raise KeyError(f"{namespace}.{key} is not a registered setting")
        value = str(value)
        if self.backend:
            await self.backend.set_setting(namespace, key, value)
        self._values[(namespace, key)] = value
        return value
