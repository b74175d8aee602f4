"""Output guards for LLM responses.

Models often wrap JSON in prose or markdown fences.  The guard extracts
the outermost delimited substring and parses it strictly: it never tries
to repair or guess, it fails closed with :class:`MalformedResponseError`.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .base import MalformedResponseError

logger = logging.getLogger(__name__)

JSON_OBJECT = "json-object"
JSON_ARRAY = "json-array"
FREE_TEXT = "free-text"

_DELIMITERS = {
    JSON_OBJECT: ("{", "}", dict, "objeto JSON"),
    JSON_ARRAY: ("[", "]", list, "array JSON"),
}


class JSONOutputGuard:
    """Locate and parse the JSON payload embedded in raw LLM text."""

    @staticmethod
    def extract(raw_text: str, shape: str = JSON_OBJECT) -> Any:
        """Return the parsed JSON value of the requested shape.

        The payload spans from the first opening delimiter to the last
        closing one, so leading/trailing commentary is tolerated.
        """
        if shape not in _DELIMITERS:
            raise ValueError(f"Unsupported JSON shape: {shape!r}")
        opening, closing, expected_type, label = _DELIMITERS[shape]

        text = raw_text or ""
        start = text.find(opening)
        end = text.rfind(closing)
        if start < 0 or end < 0 or end < start:
            raise MalformedResponseError(
                f"Nenhum {label} válido encontrado na resposta.",
                raw_text=text,
                expected_shape=shape,
            )

        candidate = text[start:end + 1]
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                f"Não foi possível interpretar o {label}: {e.msg}",
                raw_text=text,
                expected_shape=shape,
            ) from e

        if not isinstance(value, expected_type):
            raise MalformedResponseError(
                f"A resposta não é um {label}.",
                raw_text=text,
                expected_shape=shape,
            )
        return value
