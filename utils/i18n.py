"""
Localization helpers (src/utils/i18n.py)

Loads the translation files shipped in utils/lang/ and formats localized strings.
Keys follow the D616EE.* naming used by the chat card tools.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)

LANG_DIR = Path(__file__).resolve().parent / "lang"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class Localizer:
    """Looks up translated strings, falling back to the key itself"""

    def __init__(self, lang: str = DEFAULT_LANGUAGE, lang_dir: Path = LANG_DIR):
        self.lang = lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE
        self.lang_dir = lang_dir
        self.strings: Dict[str, str] = self._load(self.lang)

    def _load(self, lang: str) -> Dict[str, str]:
        path = self.lang_dir / f"{lang}.json"
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"No translation file for '{lang}' at {path}")
            return {}
        except json.JSONDecodeError as e:
            logger.error(f"Invalid translation file {path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def localize(self, key: str) -> str:
        return self.strings.get(key, key)

    def t(self, key: str, data: Optional[Dict[str, Any]] = None) -> str:
        """
        Localize a key and fill {placeholders} from data.
        Placeholders without a matching key are left untouched.
        """
        text = self.localize(key)
        if not data:
            return text
        return _PLACEHOLDER.sub(
            lambda m: str(data[m.group(1)]) if m.group(1) in data else m.group(0),
            text
        )
