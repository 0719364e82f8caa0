"""
base.py - Abstract base class for tool services.

This module defines the execution boundary between the flow engine and a
backend:
- ToolService: executes one step's typed input against a backend
- RawResult: the unparsed response plus an optional sanitizer

Services implement this ABC to provide pluggable backends (chat
completion, image generation, image editing, local computation, stubs).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from ..types import TokenUsage, TypedInput

Sanitizer = Callable[[Dict[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class RawResult:
    """Unparsed response from a ToolService.

    Attributes:
        raw_data: Structured payload returned by the backend.
        sanitize: Optional transformation applied to raw_data exactly once,
            before any TypedOutput is constructed from it.
        usage: Token usage reported for the call.
    """

    raw_data: Dict[str, Any]
    sanitize: Optional[Sanitizer] = None
    usage: TokenUsage = field(default_factory=TokenUsage)

    @classmethod
    def from_response(
        cls,
        raw_data: Mapping[str, Any],
        sanitize: Optional[Sanitizer] = None,
        usage: Optional[Mapping[str, Any]] = None,
    ) -> "RawResult":
        """Build from a provider response body and its usage block."""
        return cls(raw_data=dict(raw_data), sanitize=sanitize, usage=TokenUsage.from_mapping(usage))


class ToolService(ABC):
    """Abstract base class for step execution backends.

    Services are responsible for:
    - Translating a TypedInput into a backend request
    - Returning a RawResult (and optionally a sanitizer for it)

    Services do NOT own:
    - Step ordering or dependency wiring (that's the FlowEngine's job)
    - Retrying (the engine retries on TransportError)
    - Parsing or validating output (the engine does that via its registry)

    execute() may be called more than once with the same input when the
    engine retries, so it must be safe to repeat.
    """

    @property
    def service_id(self) -> str:
        """Identifier used in log messages."""
        return type(self).__name__

    @abstractmethod
    def execute(self, step_input: TypedInput) -> Union[RawResult, Awaitable[RawResult]]:
        """Execute one step's input against the backend.

        Args:
            step_input: Fully validated input for the step.

        Returns:
            RawResult, or an awaitable resolving to one.

        Raises:
            TransportError: On network or protocol failure (retryable).
            ValidationError: If the input was rejected before transport.
        """
        ...
