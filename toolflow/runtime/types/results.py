"""
results.py - Step results and accumulated pipeline state.

Types:
    TokenUsage: Token accounting for one step (or an aggregate).
    StepResult: Immutable record of one step's execution.
    PipelineState: Ordered, append-only history of StepResults for one run.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..errors import DuplicateStepError
from .issues import Issue, IssueSeverity, has_errors
from .typed import TypedInput, TypedOutput


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported by a backend for one call."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "TokenUsage":
        """Build from a provider usage dict; total defaults to prompt + completion."""
        if not data:
            return cls()
        prompt = int(data.get("prompt_tokens") or 0)
        completion = int(data.get("completion_tokens") or 0)
        total = data.get("total_tokens")
        return cls(
            prompt_tokens=prompt,
            completion_tokens=completion,
            total_tokens=int(total) if total is not None else prompt + completion,
        )

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    def to_dict(self) -> Dict[str, int]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class StepResult:
    """Record of one step's execution.

    Immutable; use replace() to derive a copy with some fields changed.

    Attributes:
        step_name: The step this result belongs to.
        input: The typed input the step was executed with. None when the
            step was skipped because a dependency did not succeed.
        output: The typed output, or None if execution or construction failed.
        issues: Issues reported while executing and validating the step.
        succeeded: True if an output was produced and no ERROR issue was raised.
        tool_kind: Tool kind tag of the step.
        attempts: Number of execute calls made for this step.
        usage: Token usage reported by the backend for the successful call.
        duration_ms: Wall-clock duration of the step. Not part of equality.
    """

    step_name: str
    input: Optional[TypedInput]
    output: Optional[TypedOutput] = None
    issues: Tuple[Issue, ...] = ()
    succeeded: bool = False
    tool_kind: str = ""
    attempts: int = 0
    usage: TokenUsage = field(default_factory=TokenUsage)
    duration_ms: int = field(default=0, compare=False)

    def replace(self, **changes: Any) -> "StepResult":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    @property
    def errors(self) -> List[Issue]:
        return self.issues_with_severity(IssueSeverity.ERROR)

    @property
    def warnings(self) -> List[Issue]:
        return self.issues_with_severity(IssueSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return has_errors(self.issues)

    def issues_with_severity(self, severity: IssueSeverity) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity is severity]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "step_name": self.step_name,
            "tool_kind": self.tool_kind,
            "succeeded": self.succeeded,
            "attempts": self.attempts,
            "duration_ms": self.duration_ms,
            "input": self.input.encode() if self.input is not None else None,
            "output": self.output.to_payload() if self.output is not None else None,
            "issues": [issue.to_dict() for issue in self.issues],
            "usage": self.usage.to_dict(),
        }


class PipelineState:
    """Ordered mapping of step name to StepResult.

    Insertion order is execution order. During a run the FlowEngine is the
    only caller of record(); everything else reads.
    """

    def __init__(self, results: Iterable[StepResult] = ()):
        self._results: Dict[str, StepResult] = {}
        self.cancelled = False
        for result in results:
            self.record(result)

    def record(self, result: StepResult) -> None:
        """Append a result. Names are unique within a state."""
        if result.step_name in self._results:
            raise DuplicateStepError(result.step_name)
        self._results[result.step_name] = result

    def get(self, step_name: str) -> Optional[StepResult]:
        return self._results.get(step_name)

    def all_results(self) -> Tuple[StepResult, ...]:
        return tuple(self._results.values())

    def names(self) -> Tuple[str, ...]:
        return tuple(self._results)

    def snapshot(self) -> "PipelineState":
        """Return an independent copy of the current state."""
        copy = PipelineState(self.all_results())
        copy.cancelled = self.cancelled
        return copy

    @property
    def succeeded(self) -> bool:
        """True if every recorded step succeeded."""
        return all(result.succeeded for result in self._results.values())

    def failed_results(self) -> List[StepResult]:
        return [result for result in self._results.values() if not result.succeeded]

    def all_issues(self) -> List[Issue]:
        issues: List[Issue] = []
        for result in self._results.values():
            issues.extend(result.issues)
        return issues

    def token_usage(self) -> TokenUsage:
        """Aggregate token usage across all recorded steps."""
        total = TokenUsage()
        for result in self._results.values():
            total = total + result.usage
        return total

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "steps": [result.to_dict() for result in self._results.values()],
            "succeeded": self.succeeded,
            "cancelled": self.cancelled,
            "issue_count": len(self.all_issues()),
            "token_usage": self.token_usage().to_dict(),
        }

    def __contains__(self, step_name: object) -> bool:
        return step_name in self._results

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[StepResult]:
        return iter(self.all_results())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PipelineState):
            return NotImplemented
        return self.cancelled == other.cancelled and self.all_results() == other.all_results()

    def __repr__(self) -> str:
        return f"PipelineState(steps={list(self._results)}, cancelled={self.cancelled})"
