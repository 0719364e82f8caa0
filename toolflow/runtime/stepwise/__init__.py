"""
toolflow.runtime.stepwise - Sequential step execution package.

Package Structure:
    engine.py    - FlowEngine coordinator
    steps.py     - StepDefinition, dependency resolution, declaration checks
    registry.py  - OutputRegistry (tool kind -> constructor/validators)
    retry.py     - RetryPolicy, backoff functions, call_with_retry
    models.py    - FlowOptions, ResolvedStep

Usage:
    from toolflow.runtime.stepwise import FlowEngine, StepDefinition
    from toolflow.tools import builtin_registry

    engine = FlowEngine(service, builtin_registry())
    state = engine.run(steps)
"""

from .engine import FlowEngine
from .models import FlowOptions, ResolvedStep
from .registry import OutputConstructor, OutputRegistry
from .retry import (
    Backoff,
    RetriesExhaustedError,
    RetryPolicy,
    call_with_retry,
    constant_backoff,
    exponential_backoff,
    no_backoff,
)
from .steps import InputBuilder, OutputValidator, StepDefinition, check_declaration_order

__all__ = [
    # === Engine (primary API) ===
    "FlowEngine",
    "FlowOptions",
    "ResolvedStep",
    # === Steps ===
    "StepDefinition",
    "InputBuilder",
    "OutputValidator",
    "check_declaration_order",
    # === Registry ===
    "OutputRegistry",
    "OutputConstructor",
    # === Retry ===
    "RetryPolicy",
    "Backoff",
    "RetriesExhaustedError",
    "call_with_retry",
    "no_backoff",
    "constant_backoff",
    "exponential_backoff",
]
