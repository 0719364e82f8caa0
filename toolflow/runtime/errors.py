"""
errors.py - Exception taxonomy for flow execution.

Structural errors abort a run:
- MissingDependencyError: a step depends on a name that is not available
- DuplicateStepError: two steps share a name
- UnknownToolKindError: no output constructor registered for a tool kind
- InputBuildError: a step's input builder failed

Step-local errors are captured into the step's StepResult unless the run
is fail-fast:
- TransportError: backend/network failure (retried)
- ValidationError: malformed input or output (never retried)

StepFailedError is raised only in fail-fast mode, after the failed
StepResult has been appended.

Every ToolflowError may carry the partial PipelineState of the aborted run
in its ``state`` attribute.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .types.results import PipelineState, StepResult


class ToolflowError(Exception):
    """Base class for all toolflow errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.state: Optional["PipelineState"] = None


class MissingDependencyError(ToolflowError):
    """A step references a dependency that has not run (or never will)."""

    def __init__(self, step_name: str, dependency: str, reason: str = "has not been recorded"):
        super().__init__(
            f"Step '{step_name}' depends on '{dependency}', which {reason}"
        )
        self.step_name = step_name
        self.dependency = dependency


class DuplicateStepError(ToolflowError):
    """Two step definitions in one run share a name."""

    def __init__(self, step_name: str):
        super().__init__(f"Step name '{step_name}' is declared more than once")
        self.step_name = step_name


class UnknownToolKindError(ToolflowError):
    """No output constructor is registered for a step's tool kind."""

    def __init__(self, step_name: str, tool_kind: str):
        super().__init__(
            f"Step '{step_name}' uses tool kind '{tool_kind}', which has no registered output constructor"
        )
        self.step_name = step_name
        self.tool_kind = tool_kind


class InputBuildError(ToolflowError):
    """A step's input builder raised or produced something that is not a TypedInput."""

    def __init__(self, step_name: str, problem: str):
        super().__init__(f"Failed to build input for step '{step_name}': {problem}")
        self.step_name = step_name


class TransportError(ToolflowError):
    """Network or protocol failure while talking to a backend. Retryable."""


class ValidationError(ToolflowError):
    """Input or output data is malformed. Never retried.

    Attributes:
        detail: Optional structured payload describing what failed
            (e.g. the pydantic error list).
    """

    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.detail = detail


class StepFailedError(ToolflowError):
    """A step failed while the run was configured fail-fast."""

    def __init__(self, step_name: str, result: "StepResult"):
        reason = result.errors[0].message if result.errors else "step did not succeed"
        super().__init__(f"Step '{step_name}' failed: {reason}")
        self.step_name = step_name
        self.result = result
