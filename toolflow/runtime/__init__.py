# toolflow/runtime package
# Provides the sequential flow engine that wires typed step outputs into
# later step inputs and executes each step against a pluggable ToolService.
#
# Core components:
#   - types: Issue, TypedInput/TypedOutput, StepResult, PipelineState
#   - errors: Error taxonomy (structural vs step-local)
#   - engines: ToolService interface + local and stub services
#   - stepwise: StepDefinition, OutputRegistry, RetryPolicy, FlowEngine
#   - validators: Reusable output validators
#
# Usage:
#     from toolflow.runtime import FlowEngine, StepDefinition
#     engine = FlowEngine(service, registry)
#     state = engine.run(steps)
#     state.get("generate").output

from .engines import LocalToolService, RawResult, StubToolService, ToolService
from .errors import (
    DuplicateStepError,
    InputBuildError,
    MissingDependencyError,
    StepFailedError,
    ToolflowError,
    TransportError,
    UnknownToolKindError,
    ValidationError,
)
from .stepwise import (
    FlowEngine,
    FlowOptions,
    OutputRegistry,
    RetryPolicy,
    StepDefinition,
    check_declaration_order,
    constant_backoff,
    exponential_backoff,
    no_backoff,
)
from .types import (
    Issue,
    IssueSeverity,
    PipelineState,
    StepResult,
    TokenUsage,
    TypedInput,
    TypedOutput,
)

__all__ = [
    # Types
    "Issue",
    "IssueSeverity",
    "TypedInput",
    "TypedOutput",
    "StepResult",
    "TokenUsage",
    "PipelineState",
    # Errors
    "ToolflowError",
    "MissingDependencyError",
    "DuplicateStepError",
    "UnknownToolKindError",
    "InputBuildError",
    "TransportError",
    "ValidationError",
    "StepFailedError",
    # Services
    "ToolService",
    "RawResult",
    "LocalToolService",
    "StubToolService",
    # Engine
    "FlowEngine",
    "FlowOptions",
    "OutputRegistry",
    "RetryPolicy",
    "StepDefinition",
    "check_declaration_order",
    "no_backoff",
    "constant_backoff",
    "exponential_backoff",
]
