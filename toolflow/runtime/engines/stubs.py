"""
stubs.py - Stub ToolService for testing and CI.

StubToolService returns canned payloads keyed by tool kind without calling
any backend. It can also script transport failures and input rejections,
and records every call so tests can assert on attempt counts.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..errors import TransportError, ValidationError
from ..types import TypedInput
from .base import RawResult, Sanitizer, ToolService

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], Callable[[TypedInput], Mapping[str, Any]]]


class StubToolService(ToolService):
    """Zero-cost ToolService with canned responses.

    Args:
        responses: Payload per tool kind. A value may be a callable that
            receives the TypedInput and returns the payload.
        sanitizers: Optional sanitizer per tool kind, returned on RawResult.
        usage: Optional usage block per tool kind.
        transport_failures: Number of leading calls per tool kind that raise
            TransportError before the canned payload is returned.
        reject_kinds: Tool kinds whose calls raise ValidationError.
    """

    def __init__(
        self,
        responses: Mapping[str, Payload],
        sanitizers: Optional[Mapping[str, Sanitizer]] = None,
        usage: Optional[Mapping[str, Mapping[str, Any]]] = None,
        transport_failures: Optional[Mapping[str, int]] = None,
        reject_kinds: Iterable[str] = (),
    ):
        self._responses = dict(responses)
        self._sanitizers = dict(sanitizers or {})
        self._usage = dict(usage or {})
        self._remaining_failures = dict(transport_failures or {})
        self._reject_kinds = frozenset(reject_kinds)
        self.calls: List[TypedInput] = []

    @property
    def service_id(self) -> str:
        return "stub"

    def calls_for(self, tool_kind: str) -> List[TypedInput]:
        """Return the recorded inputs for one tool kind, in call order."""
        return [call for call in self.calls if call.tool_kind == tool_kind]

    def execute(self, step_input: TypedInput) -> RawResult:
        tool_kind = step_input.tool_kind
        self.calls.append(step_input)

        if tool_kind in self._reject_kinds:
            raise ValidationError(f"[STUB] Rejected input for tool kind '{tool_kind}'")

        remaining = self._remaining_failures.get(tool_kind, 0)
        if remaining > 0:
            self._remaining_failures[tool_kind] = remaining - 1
            logger.debug("[STUB] Simulating transport failure for %s (%d left)", tool_kind, remaining - 1)
            raise TransportError(f"[STUB] Simulated transport failure for '{tool_kind}'")

        if tool_kind not in self._responses:
            raise TransportError(f"[STUB] No canned response for tool kind '{tool_kind}'")

        payload = self._responses[tool_kind]
        raw_data: Dict[str, Any] = dict(payload(step_input) if callable(payload) else payload)
        return RawResult.from_response(
            raw_data,
            sanitize=self._sanitizers.get(tool_kind),
            usage=self._usage.get(tool_kind),
        )
