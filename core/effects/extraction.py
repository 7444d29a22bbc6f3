"""
Chat card extraction (src/core/effects/extraction.py)

Turns a semi-structured chat card into a short effect name and an HTML-safe description.
Cards usually carry a labelled line ("Power: Phase Self", "Item: ...", "Trait: ...",
"Tag: ..."), but flattened cards may run several fields together on one line, so names
are cut at the next structured field (Action/Duration/Cost, in English or Portuguese).

Name priority:
1. Item/power referenced by the card flags and owned by the speaking character
2. First labelled line (power > item > trait > tag) of the flavor, then of the content
3. Same labels searched anywhere in the text
4. A flattened snippet of the card, else the localized fallback name
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from utils.constants import (
    BLOCK_TAGS, DEFAULT_SYSTEM_ID, DROP_LABELS, ITEM_FLAG_KEYS, MAX_NAME_LENGTH, NAME_LABELS
)

logger = logging.getLogger(__name__)

# Following structured fields end a name or description
_STOP_ANYWHERE = re.compile(r"\b(acao|ação|duracao|duração|duration|custo|cost)\s*:", re.IGNORECASE)
_STOP_LINE = [
    re.compile(r"^a[cç][aã]o\s*:", re.IGNORECASE),
    re.compile(r"^dura[cç][aã]o\s*:", re.IGNORECASE),
    re.compile(r"^duration\s*:", re.IGNORECASE),
    re.compile(r"^custo\s*:", re.IGNORECASE),
    re.compile(r"^cost\s*:", re.IGNORECASE),
]
_DROP_LINE = [re.compile(rf"^{label}\s*:", re.IGNORECASE) for label in DROP_LABELS]

_LINE_PATTERNS = [re.compile(rf"^{label}\s*:\s*(.+)$", re.IGNORECASE) for label in NAME_LABELS]
_ANY_PATTERNS = [re.compile(rf"{label}\s*:\s*([^\n]+)", re.IGNORECASE) for label in NAME_LABELS]

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\"": "&quot;",
    "'": "&#39;",
}

@dataclass
class Speaker:
    """Who a chat card was posted as"""
    alias: str = ""
    actor: Optional[str] = None  # character id
    token: Optional[str] = None  # token id on the card's scene

@dataclass
class ChatCard:
    """The parts of a chat message the extractor reads"""
    id: Optional[int] = None
    flavor: str = ""
    content: str = ""
    speaker: Speaker = field(default_factory=Speaker)
    flags: Dict[str, Any] = field(default_factory=dict)
    scene_id: Optional[int] = None

def escape_html(text: Any) -> str:
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in str(text if text is not None else ""))

def html_to_text_lines(html: Any) -> Tuple[str, List[str]]:
    """
    Flatten chat HTML to text, keeping line structure.
    Returns (text, non-empty trimmed lines).
    """
    raw = str(html if html is not None else "")
    try:
        soup = BeautifulSoup(raw, "html.parser")
        for br in soup.find_all("br"):
            br.replace_with("\n")
        for element in soup.find_all(BLOCK_TAGS):
            element.append("\n")
        text = soup.get_text()
    except Exception as e:
        logger.debug(f"HTML parse failed, using regex flattening: {e}")
        text = re.sub(r"<br\s*/?>", "\n", raw, flags=re.IGNORECASE)
        text = re.sub(r"<[^>]+>", " ", text)

    text = text.replace("\r", "")
    lines = [line.strip() for line in text.split("\n")]
    return text, [line for line in lines if line]

def clean_name(name: Any) -> str:
    """Trim a candidate name down to the name itself"""
    out = re.sub(r"\s+", " ", str(name if name is not None else "")).strip()
    # If the card got flattened, cut before common sections
    stop = _STOP_ANYWHERE.search(out)
    if stop and stop.start() > 0:
        out = out[:stop.start()].strip()
    # Description appended to the same line
    out = re.sub(r"\s+(o|a)\s+personagem\b.*$", "", out, flags=re.IGNORECASE).strip()
    out = re.sub(r"\s+the\s+character\b.*$", "", out, flags=re.IGNORECASE).strip()
    out = re.split(r"\s{2,}", out)[0].strip()
    return out[:MAX_NAME_LENGTH].rstrip()

def parse_for_name(html: Any) -> Optional[str]:
    """Labelled-line search over one HTML source, None when nothing matches"""
    text, lines = html_to_text_lines(html)

    # Prefer exact line formats
    for pattern in _LINE_PATTERNS:
        for line in lines:
            match = pattern.match(line)
            if match and match.group(1):
                found = clean_name(match.group(1))
                if found:
                    return found

    # Boundaries may have been merged upstream
    for pattern in _ANY_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            found = clean_name(match.group(1))
            if found:
                return found

    return None

def item_name_from_flags(card: ChatCard, actor, system_id: str = DEFAULT_SYSTEM_ID) -> Optional[str]:
    sys_flags = card.flags.get(system_id) or card.flags.get(DEFAULT_SYSTEM_ID) or {}
    item_id = next((sys_flags.get(k) for k in ITEM_FLAG_KEYS if sys_flags.get(k)), None)
    if not item_id or actor is None or not hasattr(actor, "get_item"):
        return None
    item = actor.get_item(item_id)
    return item.name if item is not None and item.name else None

def extract_effect_name(
    card: ChatCard,
    fallback_name: str,
    actor=None,
    system_id: str = DEFAULT_SYSTEM_ID
) -> str:
    """Best-effort short name for the effect described by a chat card"""
    item_name = item_name_from_flags(card, actor, system_id)
    if item_name:
        return item_name

    # Flavor usually carries the most reliable hint
    sources = [src for src in (card.flavor, card.content) if src]

    for src in sources:
        found = parse_for_name(src)
        if found:
            return found

    for src in sources:
        _, lines = html_to_text_lines(src)
        snippet = " ".join(lines).strip()
        if snippet:
            name = clean_name(snippet)[:MAX_NAME_LENGTH]
            if name:
                return name

    return fallback_name

def extract_effect_description(card: ChatCard, effect_name: str, fallback_description: str) -> str:
    """
    Main descriptive text of the card, HTML-escaped with <br> line breaks.
    Stops at the first Action/Duration/Cost line.
    """
    _, lines = html_to_text_lines(card.content)

    speaker_name = str(card.speaker.alias or "").strip()
    name = str(effect_name or "").strip()

    kept = []
    for line in lines:
        if speaker_name and line == speaker_name:
            continue
        if name and line == name:
            continue
        if any(p.match(line) for p in _DROP_LINE):
            continue
        if any(p.match(line) for p in _STOP_LINE):
            break
        kept.append(line)

    text = "\n".join(kept).strip()
    return escape_html(text or fallback_description).replace("\n", "<br>")
