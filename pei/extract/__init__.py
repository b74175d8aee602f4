"""Parsing of AI completions into form values and typed records."""

from .parser import (
    normalize_activities,
    parse_activities,
    parse_analysis,
    parse_critique,
    parse_free_text,
    parse_response,
)

__all__ = [
    "parse_response",
    "parse_free_text",
    "parse_critique",
    "parse_activities",
    "parse_analysis",
    "normalize_activities",
]
