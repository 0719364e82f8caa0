"""Core data types for flow execution.

Re-exports the issue, typed input/output and result types so callers can
import them from one place:

    from toolflow.runtime.types import Issue, PipelineState, StepResult
"""

from .issues import Issue, IssueSeverity, has_errors, number_issues
from .results import PipelineState, StepResult, TokenUsage
from .typed import TypedInput, TypedOutput

__all__ = [
    "Issue",
    "IssueSeverity",
    "has_errors",
    "number_issues",
    "TypedInput",
    "TypedOutput",
    "StepResult",
    "TokenUsage",
    "PipelineState",
]
