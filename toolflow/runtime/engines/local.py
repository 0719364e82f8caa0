"""
local.py - In-process ToolService for local computation steps.

Some steps (formatting, deterministic transforms, arithmetic on earlier
outputs) need no remote call. LocalToolService runs a plain Python
function per tool kind on the encoded input and wraps its return value in
a RawResult, so local steps get the same wiring, output construction and
validation as remote ones. Token usage is always zero.

A function that raises, or returns something other than a mapping, is
reported as a ValidationError, so the step fails without being retried.
ToolflowErrors raised by the function (e.g. TransportError) pass through.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping

from ..errors import ToolflowError, ValidationError
from ..types import TypedInput
from .base import RawResult, ToolService

logger = logging.getLogger(__name__)

ComputeFunction = Callable[[Dict[str, Any]], Mapping[str, Any]]


class LocalToolService(ToolService):
    """Run registered compute functions instead of calling a backend."""

    def __init__(self, functions: Mapping[str, ComputeFunction]):
        self._functions = dict(functions)

    @property
    def service_id(self) -> str:
        return "local"

    def register(self, tool_kind: str, function: ComputeFunction) -> None:
        self._functions[tool_kind] = function

    def execute(self, step_input: TypedInput) -> RawResult:
        function = self._functions.get(step_input.tool_kind)
        if function is None:
            raise ValidationError(
                f"No local compute function registered for tool kind '{step_input.tool_kind}'"
            )
        logger.debug("Running local compute function for %s", step_input.tool_kind)
        try:
            payload = function(step_input.encode())
        except ToolflowError:
            raise
        except Exception as exc:
            raise ValidationError(
                f"Local compute function for '{step_input.tool_kind}' failed: {exc}",
                detail={"error_type": type(exc).__name__},
            ) from exc
        if not isinstance(payload, Mapping):
            raise ValidationError(
                f"Local compute function for '{step_input.tool_kind}' returned {type(payload).__name__}, expected a mapping",
                detail={"payload_type": type(payload).__name__},
            )
        return RawResult.from_response(payload)
