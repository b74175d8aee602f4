"""LLM audit logging: tracks every AI call for cost monitoring and debugging.

Audit records are stored in-memory by default, with an optional persist
callback (e.g. a DB insert).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .base import LLMResponse

logger = logging.getLogger(__name__)


@dataclass
class AuditRecord:
    """Single LLM call audit entry."""

    action: str = ""
    field_id: str = ""
    provider: str = ""
    model: str = ""
    prompt_hash: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    thinking_budget: int = 0
    timestamp: float = field(default_factory=time.time)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "field_id": self.field_id,
            "provider": self.provider,
            "model": self.model,
            "prompt_hash": self.prompt_hash,
            "token_usage": {
                "input": self.input_tokens,
                "output": self.output_tokens,
            },
            "latency_ms": self.latency_ms,
            "thinking_budget": self.thinking_budget,
            "timestamp": self.timestamp,
            "error": self.error,
        }


class AuditLogger:
    """Collects and persists LLM audit records.

    Usage::

        audit = AuditLogger()
        # ... after LLM call ...
        audit.log(response, action="smart", field_id="metas-curto")

        print(audit.summary())
    """

    def __init__(self, persist_fn: Optional[Callable[[AuditRecord], None]] = None):
        """
        Parameters
        ----------
        persist_fn : callable, optional
            Function to persist an audit record (e.g., DB insert).
            If None, records are stored in-memory only.
        """
        self._records: List[AuditRecord] = []
        self._persist_fn = persist_fn

    def log(
        self,
        response: Optional[LLMResponse],
        *,
        action: str = "",
        field_id: str = "",
        thinking_budget: int = 0,
        provider: str = "",
        error: Optional[str] = None,
    ) -> AuditRecord:
        """Record an LLM call.  ``response`` is None for failed calls."""
        record = AuditRecord(
            action=action,
            field_id=field_id,
            provider=response.provider if response else provider,
            model=response.model if response else "",
            prompt_hash=response.prompt_hash if response else "",
            input_tokens=response.input_tokens if response else 0,
            output_tokens=response.output_tokens if response else 0,
            latency_ms=response.latency_ms if response else 0,
            thinking_budget=thinking_budget,
            error=error,
        )
        self._records.append(record)

        if self._persist_fn:
            try:
                self._persist_fn(record)
            except Exception as e:
                logger.error("Failed to persist audit record: %s", e)

        logger.info(
            "LLM audit: provider=%s model=%s tokens=%d+%d latency=%dms action=%s field=%s",
            record.provider,
            record.model,
            record.input_tokens,
            record.output_tokens,
            record.latency_ms,
            record.action,
            record.field_id,
        )
        return record

    def summary(self) -> Dict[str, Any]:
        """Return aggregate stats for all recorded calls."""
        total_input = sum(r.input_tokens for r in self._records)
        total_output = sum(r.output_tokens for r in self._records)
        total_latency = sum(r.latency_ms for r in self._records)
        errors = sum(1 for r in self._records if r.error)

        by_action: Dict[str, Dict[str, int]] = {}
        for r in self._records:
            if r.action not in by_action:
                by_action[r.action] = {"calls": 0, "input_tokens": 0, "output_tokens": 0}
            by_action[r.action]["calls"] += 1
            by_action[r.action]["input_tokens"] += r.input_tokens
            by_action[r.action]["output_tokens"] += r.output_tokens

        return {
            "total_calls": len(self._records),
            "total_input_tokens": total_input,
            "total_output_tokens": total_output,
            "total_latency_ms": total_latency,
            "errors": errors,
            "by_action": by_action,
        }

    @property
    def records(self) -> List[AuditRecord]:
        return list(self._records)
