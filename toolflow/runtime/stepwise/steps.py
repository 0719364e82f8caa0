"""
steps.py - Step definitions and dependency resolution.

A StepDefinition names a step, the tool kind it runs, the earlier steps
whose results it consumes, and the function that builds its typed input
from those results. resolve() is a pure projection over PipelineState:
the builder sees only the results it declared, in declaration order.

Usage:
    generate = StepDefinition.fixed("generate", ImageGenerationInput(prompt="a lighthouse"))
    edit = StepDefinition(
        name="edit",
        tool_kind="edit_image",
        depends_on=("generate",),
        input_builder=lambda results: ImageEditInput(
            image_id=results[0].output.id, prompt="add fog"
        ),
    )
    check_declaration_order([generate, edit])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from ..errors import DuplicateStepError, InputBuildError, MissingDependencyError
from ..types import Issue, PipelineState, StepResult, TypedInput, TypedOutput
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

InputBuilder = Callable[[Tuple[StepResult, ...]], TypedInput]
OutputValidator = Callable[[TypedOutput], Iterable[Issue]]
InputSanitizer = Callable[[Dict[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class StepDefinition:
    """Static description of one step in a flow.

    Attributes:
        name: Unique name of the step within a run.
        tool_kind: Tag of the tool this step runs; selects the output
            constructor and registry validators.
        input_builder: Builds the step's TypedInput from its dependency
            results (an empty tuple when depends_on is empty).
        depends_on: Names of earlier steps whose results the builder receives.
        validators: Step-specific output validators, run after the ones
            registered for the tool kind.
        description: Optional human-readable description of the step.
        retry_policy: Overrides the run's retry policy for this step.
        fail_fast: Overrides the run's fail-fast setting for this step.
        input_sanitizer: Applied to the encoded input after building; the
            result is decoded back into the same TypedInput type.
    """

    name: str
    tool_kind: str
    input_builder: InputBuilder
    depends_on: Tuple[str, ...] = ()
    validators: Tuple[OutputValidator, ...] = ()
    description: str = ""
    retry_policy: Optional[RetryPolicy] = None
    fail_fast: Optional[bool] = None
    input_sanitizer: Optional[InputSanitizer] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("StepDefinition.name must not be empty")
        if not self.tool_kind:
            raise ValueError(f"StepDefinition '{self.name}' has no tool_kind")
        # Callers may pass lists; store tuples
        object.__setattr__(self, "depends_on", tuple(self.depends_on))
        object.__setattr__(self, "validators", tuple(self.validators))

    @classmethod
    def fixed(
        cls,
        name: str,
        step_input: TypedInput,
        validators: Sequence[OutputValidator] = (),
        description: str = "",
        **overrides: Any,
    ) -> "StepDefinition":
        """Define a dependency-free step whose input is known up front.

        ``overrides`` sets retry_policy, fail_fast or input_sanitizer.
        """
        return cls(
            name=name,
            tool_kind=step_input.tool_kind,
            input_builder=lambda _results: step_input,
            validators=tuple(validators),
            description=description,
            **overrides,
        )

    def effective_fail_fast(self, default: bool) -> bool:
        return default if self.fail_fast is None else self.fail_fast

    def dependency_results(self, state: PipelineState) -> Tuple[StepResult, ...]:
        """Look up the results for depends_on, in declaration order.

        Raises:
            MissingDependencyError: If a dependency has not been recorded.
        """
        results = []
        for dependency in self.depends_on:
            result = state.get(dependency)
            if result is None:
                raise MissingDependencyError(self.name, dependency)
            results.append(result)
        return tuple(results)

    def failed_dependencies(self, state: PipelineState) -> Tuple[str, ...]:
        """Names of dependencies whose results did not succeed, in declaration order.

        Raises:
            MissingDependencyError: If a dependency has not been recorded.
        """
        return tuple(result.step_name for result in self.dependency_results(state) if not result.succeeded)

    def resolve(self, state: PipelineState) -> TypedInput:
        """Build this step's input from the results it depends on.

        Raises:
            MissingDependencyError: If a dependency has not been recorded.
            InputBuildError: If the builder raises, returns something that
                is not a TypedInput or returns an input for another tool kind,
                or if the input sanitizer fails.
        """
        results = self.dependency_results(state)
        logger.debug("Resolving %s with dependencies %s", self.name, list(self.depends_on))

        try:
            built = self.input_builder(results)
        except Exception as exc:
            raise InputBuildError(self.name, f"{type(exc).__name__}: {exc}") from exc

        if not isinstance(built, TypedInput):
            raise InputBuildError(
                self.name, f"builder returned {type(built).__name__}, expected a TypedInput"
            )
        if built.tool_kind != self.tool_kind:
            raise InputBuildError(
                self.name,
                f"builder returned input for tool kind '{built.tool_kind}', expected '{self.tool_kind}'",
            )
        if self.input_sanitizer is not None:
            built = self._sanitize_input(built)
        return built

    def _sanitize_input(self, built: TypedInput) -> TypedInput:
        logger.debug("Sanitizing input for step %s", self.name)
        try:
            return type(built).decode(self.input_sanitizer(built.encode()))
        except Exception as exc:
            raise InputBuildError(self.name, f"input sanitizer failed: {type(exc).__name__}: {exc}") from exc


def check_declaration_order(steps: Sequence[StepDefinition]) -> None:
    """Verify step names are unique and every dependency is declared earlier.

    Raises:
        DuplicateStepError: If two steps share a name.
        MissingDependencyError: On a self, forward or unknown reference.
    """
    positions: Dict[str, int] = {}
    for index, step in enumerate(steps):
        if step.name in positions:
            raise DuplicateStepError(step.name)
        positions[step.name] = index

    for index, step in enumerate(steps):
        for dependency in step.depends_on:
            position: Optional[int] = positions.get(dependency)
            if dependency == step.name:
                raise MissingDependencyError(step.name, dependency, "is the step itself")
            if position is None:
                raise MissingDependencyError(step.name, dependency, "is not declared in this run")
            if position > index:
                raise MissingDependencyError(step.name, dependency, "is declared after it")
