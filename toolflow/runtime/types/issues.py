"""Issue records attached to step results.

An Issue is a structured, non-exceptional problem report produced while
building, executing or validating a step. Issues are immutable and owned by
the StepResult that reports them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class IssueSeverity(str, Enum):
    """Severity of an issue. ERROR marks the owning step as failed."""

    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def from_string(cls, value: str) -> "IssueSeverity":
        """Parse a severity name, case-insensitively.

        Accepts the four-level scale used by older flow definitions:
        low/medium map to WARNING, high/critical map to ERROR.
        """
        normalized = value.strip().lower()
        if normalized in ("warning", "warn", "low", "medium"):
            return cls.WARNING
        if normalized in ("error", "high", "critical"):
            return cls.ERROR
        raise ValueError(f"Invalid severity: {value!r}")


@dataclass(frozen=True)
class Issue:
    """A problem discovered while processing a step.

    Attributes:
        step_name: Name of the step that reported the issue.
        severity: WARNING or ERROR.
        message: Human-readable description.
        detail: Optional structured payload (validator output, error list, etc.).
        id: Identifier, unique within a StepResult. Assigned by the engine
            as "<step_name>:<n>" when left empty.
        suggestions: Ordered list of suggested resolutions.
    """

    step_name: str
    severity: IssueSeverity
    message: str
    detail: Optional[Any] = None
    id: str = ""
    suggestions: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def warning(cls, step_name: str, message: str, **kwargs: Any) -> "Issue":
        return cls(step_name=step_name, severity=IssueSeverity.WARNING, message=message, **kwargs)

    @classmethod
    def error(cls, step_name: str, message: str, **kwargs: Any) -> "Issue":
        return cls(step_name=step_name, severity=IssueSeverity.ERROR, message=message, **kwargs)

    @property
    def is_error(self) -> bool:
        return self.severity is IssueSeverity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        result: Dict[str, Any] = {
            "id": self.id,
            "step_name": self.step_name,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.detail is not None:
            result["detail"] = self.detail
        if self.suggestions:
            result["suggestions"] = list(self.suggestions)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        return cls(
            step_name=data["step_name"],
            severity=IssueSeverity.from_string(data["severity"]),
            message=data["message"],
            detail=data.get("detail"),
            id=data.get("id", ""),
            suggestions=tuple(data.get("suggestions", ())),
        )


def has_errors(issues: Iterable[Issue]) -> bool:
    """Return True if any issue has ERROR severity."""
    return any(issue.is_error for issue in issues)


def number_issues(step_name: str, issues: Iterable[Issue]) -> List[Issue]:
    """Stamp issues with their owning step.

    Fills an empty step_name and assigns sequential ids ("<step>:1",
    "<step>:2", ...) to issues that have none. Validators can therefore
    create issues without knowing which step they run for.
    """
    numbered: List[Issue] = []
    for position, issue in enumerate(issues, start=1):
        changes = {}
        if not issue.step_name:
            changes["step_name"] = step_name
        if not issue.id:
            changes["id"] = f"{step_name}:{position}"
        numbered.append(replace(issue, **changes) if changes else issue)
    return numbered
