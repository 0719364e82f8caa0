"""
models.py - Run options and resolved step bindings.

Types:
    FlowOptions: Per-run retry policy and fail-fast switch.
    ResolvedStep: A StepDefinition bound to its output constructor and
        validators, looked up once before the run starts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .registry import OutputConstructor
from .retry import RetryPolicy
from .steps import OutputValidator, StepDefinition


@dataclass(frozen=True)
class FlowOptions:
    """Options for one FlowEngine.run().

    Attributes:
        retry_policy: Attempts and backoff for TransportError retries.
        fail_fast: If True, the first failed step aborts the run with
            StepFailedError (after its result is recorded).
    """

    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    fail_fast: bool = False


@dataclass(frozen=True)
class ResolvedStep:
    """Execution binding for one step.

    Attributes:
        definition: The step as declared.
        constructor: Output constructor for the step's tool kind.
        validators: Registry validators followed by step validators.
    """

    definition: StepDefinition
    constructor: OutputConstructor
    validators: Tuple[OutputValidator, ...] = ()

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def tool_kind(self) -> str:
        return self.definition.tool_kind
