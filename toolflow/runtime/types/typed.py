"""Typed input/output contracts for tool steps.

Every tool kind defines one TypedInput variant (what is sent to the
backend) and one TypedOutput variant (the parsed, sanitized result). Both
are frozen pydantic models, so an instance is always fully validated:
there is no way to hand a partially-built input to a ToolService.

Subclasses set the ``tool_kind`` class variable, which is the tag used to
look up output constructors and validators in an OutputRegistry.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Mapping, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

InputT = TypeVar("InputT", bound="TypedInput")
OutputT = TypeVar("OutputT", bound="TypedOutput")


def _validation_error(model: Type[BaseModel], exc: PydanticValidationError) -> ValidationError:
    errors = exc.errors(include_url=False, include_context=False)
    fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in errors)
    return ValidationError(
        f"Invalid {model.__name__}: {exc.error_count()} error(s) ({fields})",
        detail=[{"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in errors],
    )


class TypedInput(BaseModel):
    """Base class for the data sent to a step's execution."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    tool_kind: ClassVar[str] = ""

    def encode(self) -> Dict[str, Any]:
        """Canonical transport representation consumed by a ToolService."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def decode(cls: Type[InputT], data: Mapping[str, Any]) -> InputT:
        """Build an input from its transport representation.

        Raises:
            ValidationError: If the data does not satisfy the model.
        """
        try:
            return cls.model_validate(dict(data))
        except PydanticValidationError as exc:
            raise _validation_error(cls, exc) from exc


class TypedOutput(BaseModel):
    """Base class for the parsed, sanitized result of a step.

    Unknown keys in the payload are ignored so providers can add fields
    without breaking parsing.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    tool_kind: ClassVar[str] = ""

    @classmethod
    def from_payload(cls: Type[OutputT], payload: Mapping[str, Any]) -> OutputT:
        """Construct the output from already-sanitized raw data.

        Raises:
            ValidationError: If the payload is not a mapping or does not
                satisfy the model.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError(
                f"Invalid {cls.__name__}: expected a mapping payload, got {type(payload).__name__}",
                detail={"payload_type": type(payload).__name__},
            )
        try:
            return cls.model_validate(dict(payload))
        except PydanticValidationError as exc:
            raise _validation_error(cls, exc) from exc

    def to_payload(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
