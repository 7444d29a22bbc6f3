"""
Status toggling (src/core/effects/toggle.py)

Applies or removes a status on a character, trying the most specific API first:

1. The character's own toggle_status_effect
2. The token-level toggle of the character's first active token
3. Manual creation/deletion of effect documents tagged with the status id

Each tier runs in its own guarded block; failure falls through to the next one.
There is no rollback: statuses applied to earlier actors stay applied.
"""

import inspect
import logging
from typing import Any, Iterable, List, Optional

logger = logging.getLogger(__name__)

async def _maybe_await(result):
    if inspect.isawaitable(result):
        return await result
    return result

def _effect_has_status(effect, status_id: str) -> bool:
    statuses = getattr(effect, "statuses", None) or ()
    return status_id in statuses

def unique_actors_from_tokens(tokens: Iterable[Any]) -> List[Any]:
    """Actors behind the tokens, one per actor id, in first-seen order"""
    actors = {}
    for token in tokens:
        actor = getattr(token, "actor", None)
        if actor is None:
            continue
        actors[actor.id] = actor
    return list(actors.values())

async def _manual_toggle(actor, status_id: str, active: bool, status_config, default_icon: str):
    active_effects = [
        e for e in (getattr(actor, "effects", None) or [])
        if not getattr(e, "disabled", False) and _effect_has_status(e, status_id)
    ]

    if not active:
        ids = [e.id for e in active_effects]
        if ids:
            return await _maybe_await(actor.delete_embedded_effects(ids))
        return None

    if active_effects:
        return None

    definition = (status_config.get(status_id) if status_config is not None else None) or {}
    return await _maybe_await(actor.create_embedded_effects([{
        "name": definition.get("name") or status_id,
        "icon": definition.get("icon") or definition.get("img") or default_icon,
        "disabled": False,
        "statuses": [status_id]
    }]))

async def toggle_status(
    actor,
    status_id: str,
    active: bool,
    status_config=None,
    default_icon: str = "",
    fallback_name: Optional[str] = None
):
    """Set a status on or off for one actor"""
    # The config entry must exist so the higher tiers can resolve label and icon
    if status_config is not None:
        status_config.ensure(status_id, fallback_name or status_id)

    # Tier 1: the character's own toggle
    try:
        toggle = getattr(actor, "toggle_status_effect", None)
        if callable(toggle):
            return await _maybe_await(toggle(status_id, active=active))
    except Exception as e:
        logger.debug(f"Actor toggle failed for {status_id}: {e}")

    # Tier 2: token-level toggle
    try:
        get_tokens = getattr(actor, "get_active_tokens", None)
        tokens = get_tokens() if callable(get_tokens) else []
        token = tokens[0] if tokens else None
        document = getattr(token, "document", None)
        if callable(getattr(document, "toggle_status_effect", None)):
            return await _maybe_await(document.toggle_status_effect(status_id, active=active))
        if callable(getattr(token, "toggle_status_effect", None)):
            return await _maybe_await(token.toggle_status_effect(status_id, active=active))
    except Exception as e:
        logger.debug(f"Token toggle failed for {status_id}: {e}")

    # Tier 3: create/delete effect documents by hand
    try:
        return await _manual_toggle(actor, status_id, active, status_config, default_icon)
    except Exception as e:
        logger.error(f"Failed to toggle status {status_id}: {e}", exc_info=True)
        return None
