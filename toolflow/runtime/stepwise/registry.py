"""
registry.py - Output constructor and validator registry.

Maps a tool-kind tag to the function that builds its TypedOutput from
sanitized raw data, plus the validators every step of that kind runs.

A registry is a plain object passed to the FlowEngine, never process-wide
state, so independent runs cannot observe each other's registrations.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple, Type

from ..types import TypedOutput
from .steps import OutputValidator

logger = logging.getLogger(__name__)

OutputConstructor = Callable[[Mapping[str, Any]], TypedOutput]


class OutputRegistry:
    """Registry of output constructors and validators keyed by tool kind."""

    def __init__(self) -> None:
        self._constructors: Dict[str, OutputConstructor] = {}
        self._validators: Dict[str, List[OutputValidator]] = {}

    @classmethod
    def from_outputs(cls, *output_types: Type[TypedOutput]) -> "OutputRegistry":
        """Build a registry from TypedOutput subclasses (keyed by their tool_kind)."""
        registry = cls()
        for output_type in output_types:
            registry.register_output(output_type)
        return registry

    def register(
        self,
        tool_kind: str,
        constructor: OutputConstructor,
        validators: Iterable[OutputValidator] = (),
    ) -> None:
        """Register the constructor (and optional validators) for a tool kind.

        Re-registering a tool kind replaces its constructor and keeps its
        existing validators.
        """
        if not tool_kind:
            raise ValueError("tool_kind must not be empty")
        if tool_kind in self._constructors:
            logger.debug("Replacing output constructor for %s", tool_kind)
        self._constructors[tool_kind] = constructor
        for validator in validators:
            self.add_validator(tool_kind, validator)

    def register_output(
        self,
        output_type: Type[TypedOutput],
        validators: Iterable[OutputValidator] = (),
    ) -> None:
        """Register a TypedOutput subclass using its from_payload constructor."""
        if not output_type.tool_kind:
            raise ValueError(f"{output_type.__name__} does not declare a tool_kind")
        self.register(output_type.tool_kind, output_type.from_payload, validators)

    def add_validator(self, tool_kind: str, validator: OutputValidator) -> None:
        self._validators.setdefault(tool_kind, []).append(validator)

    def has_constructor(self, tool_kind: str) -> bool:
        return tool_kind in self._constructors

    def constructor_for(self, tool_kind: str) -> OutputConstructor:
        """Return the constructor for a tool kind.

        Raises:
            KeyError: If nothing is registered for the tool kind.
        """
        return self._constructors[tool_kind]

    def validators_for(self, tool_kind: str) -> Tuple[OutputValidator, ...]:
        return tuple(self._validators.get(tool_kind, ()))

    @property
    def tool_kinds(self) -> Tuple[str, ...]:
        return tuple(self._constructors)

    def copy(self) -> "OutputRegistry":
        """Return an independent copy that can be extended without affecting this one."""
        clone = OutputRegistry()
        clone._constructors = dict(self._constructors)
        clone._validators = {kind: list(validators) for kind, validators in self._validators.items()}
        return clone
