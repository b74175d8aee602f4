"""Response Parser: raw completion text -> typed results.

Shapes
------
- ``free-text``   : the trimmed text.
- ``json-object`` : the dict between the first ``{`` and the last ``}``.
- ``json-array``  : the list between the first ``[`` and the last ``]``.

Anything that does not fit fails with :class:`MalformedResponseError`;
the parser never repairs or guesses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from core.providers.base import MalformedResponseError
from core.providers.guards import FREE_TEXT, JSON_ARRAY, JSON_OBJECT, JSONOutputGuard
from pei.config.fields import DUA_FIELD, DUA_TAG, GOAL_PHASE_TAGS
from pei.config.models import Activity, CritiqueResult, PeiAnalysis

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 200


def _log_malformed(raw_text: str, error: Exception) -> None:
    logger.warning(
        "Malformed AI response (%s). Preview: %r",
        error, (raw_text or "")[:_PREVIEW_CHARS],
    )


def parse_response(raw_text: str, shape: str = FREE_TEXT) -> Any:
    """Parse *raw_text* into the requested *shape*."""
    if shape == FREE_TEXT:
        return (raw_text or "").strip()
    try:
        return JSONOutputGuard.extract(raw_text, shape)
    except MalformedResponseError as e:
        _log_malformed(raw_text, e)
        raise


# ------------------------------------------------------------------
# Activity normalization
# ------------------------------------------------------------------

def _ordered_union(*groups) -> List[str]:
    seen: Dict[str, None] = {}
    for group in groups:
        for tag in group:
            if tag and tag not in seen:
                seen[tag] = None
    return list(seen)


def normalize_activities(items: List[Any], field_id: str) -> List[Dict[str, Any]]:
    """Tag raw activity objects with the originating goal phase and DUA.

    Goal tags become the union of the item's own tags, the phase tag of
    *field_id* (short/medium/long term) and ``"DUA"`` for the DUA field,
    in first-seen order.  Applying it twice yields the same result.
    """
    phase_tag = GOAL_PHASE_TAGS.get(field_id)
    is_dua_request = field_id == DUA_FIELD
    extra = [t for t in (phase_tag, DUA_TAG if is_dua_request else None) if t]

    normalized = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise MalformedResponseError(
                f"Item {index} da lista de atividades não é um objeto JSON.",
                expected_shape=JSON_ARRAY,
            )
        existing = item.get("goalTags", item.get("goal_tags"))
        tags = existing if isinstance(existing, list) else []
        activity = dict(item)
        activity.pop("goal_tags", None)
        activity.pop("is_dua", None)
        activity["goalTags"] = _ordered_union(tags, extra)
        activity["isDUA"] = True if is_dua_request else bool(
            item.get("isDUA", item.get("is_dua", False))
        )
        normalized.append(activity)
    return normalized


# ------------------------------------------------------------------
# Typed parsers
# ------------------------------------------------------------------

def _validated(model, value: Any, raw_text: str, shape: str):
    try:
        return model.model_validate(value)
    except ValidationError as e:
        error = MalformedResponseError(
            f"A resposta da IA não tem o formato esperado: {e.error_count()} erro(s) de validação.",
            raw_text=raw_text,
            expected_shape=shape,
        )
        _log_malformed(raw_text, e)
        raise error from e


def parse_critique(raw_text: str) -> CritiqueResult:
    value = parse_response(raw_text, JSON_OBJECT)
    return _validated(CritiqueResult, value, raw_text, JSON_OBJECT)


def parse_activities(raw_text: str, field_id: str = "") -> List[Activity]:
    items = parse_response(raw_text, JSON_ARRAY)
    try:
        normalized = normalize_activities(items, field_id)
    except MalformedResponseError as e:
        e.raw_text = raw_text
        _log_malformed(raw_text, e)
        raise
    return [_validated(Activity, item, raw_text, JSON_ARRAY) for item in normalized]


def parse_analysis(raw_text: str) -> PeiAnalysis:
    value = parse_response(raw_text, JSON_OBJECT)
    return _validated(PeiAnalysis, value, raw_text, JSON_OBJECT)


def parse_free_text(raw_text: str) -> str:
    return parse_response(raw_text, FREE_TEXT)
