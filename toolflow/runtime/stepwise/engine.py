"""
engine.py - Sequential flow engine.

The FlowEngine runs a list of StepDefinitions in declaration order. For
each step it:
1. Resolves the step's dependencies against PipelineState and builds its input
2. Executes the input on the ToolService, retrying on TransportError
3. Applies the RawResult's sanitizer (if any) to the raw data
4. Constructs the TypedOutput via the registry constructor for the tool kind
5. Runs the registry and step validators, collecting Issues
6. Records the StepResult in PipelineState

Step-local failures (exhausted retries, ValidationError from the service or
the output constructor, ERROR issues from validators) are recorded on the
step's result and the run continues, unless the run is fail-fast.
A step whose dependencies did not all succeed is recorded as failed
without calling its builder or the service. Each StepDefinition may
override the run's retry policy and fail-fast setting.
Structural errors (MissingDependencyError, DuplicateStepError,
UnknownToolKindError, InputBuildError) abort the run. An aborting error
carries the partial PipelineState in its ``state`` attribute.

Usage:
    engine = FlowEngine(service, builtin_registry())
    state = engine.run([generate, edit])
    state.get("edit").output
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..engines.async_utils import resolve_maybe_awaitable
from ..engines.base import RawResult, ToolService
from ..errors import (
    StepFailedError,
    UnknownToolKindError,
    ValidationError,
)
from ..types import (
    Issue,
    PipelineState,
    StepResult,
    TokenUsage,
    TypedInput,
    TypedOutput,
    has_errors,
    number_issues,
)
from .models import FlowOptions, ResolvedStep
from .registry import OutputRegistry
from .retry import RetriesExhaustedError, call_with_retry
from .steps import StepDefinition, check_declaration_order

logger = logging.getLogger(__name__)


class FlowEngine:
    """Runs step definitions sequentially against one ToolService.

    Attributes:
        _service: Backend that executes step inputs.
        _registry: Output constructors and validators by tool kind.
        _options: Default FlowOptions; falls back to runtime config.
        _sleep: Sleep function used between retry attempts.
    """

    def __init__(
        self,
        service: ToolService,
        registry: OutputRegistry,
        options: Optional[FlowOptions] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._service = service
        self._registry = registry
        self._options = options
        self._sleep = sleep
        self._stop_event = threading.Event()

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def request_stop(self) -> None:
        """Ask the current run to stop before its next step.

        An in-flight execute() call is never interrupted.
        """
        self._stop_event.set()
        logger.info("Stop requested")

    def clear_stop(self) -> None:
        self._stop_event.clear()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(
        self,
        steps: Sequence[StepDefinition],
        options: Optional[FlowOptions] = None,
    ) -> PipelineState:
        """Execute steps in declaration order.

        Args:
            steps: Step definitions; dependencies must refer to earlier steps.
            options: Overrides the engine's default options for this run.

        Returns:
            The PipelineState with one StepResult per executed step. If a
            stop was requested, the partial state with ``cancelled`` set.

        Raises:
            MissingDependencyError, DuplicateStepError, UnknownToolKindError:
                Declaration defects, raised before any step executes.
            InputBuildError: A step's input builder or input sanitizer failed.
            StepFailedError: A step failed and the run (or step) is fail-fast.

        Any exception leaving run() has the partial PipelineState attached
        as its ``state`` attribute, including exceptions raised by a
        ToolService outside the toolflow error taxonomy.
        """
        options = options or self._resolve_default_options()
        state = PipelineState()

        try:
            self._run_steps(self._prepare(tuple(steps)), state, options)
        except Exception as exc:
            if getattr(exc, "state", None) is None:
                exc.state = state
            raise

        logger.info(
            "Flow finished: %d step(s) recorded, %d failed",
            len(state),
            len(state.failed_results()),
        )
        return state

    def _run_steps(
        self,
        resolved: List[ResolvedStep],
        state: PipelineState,
        options: FlowOptions,
    ) -> None:
        logger.info(
            "Starting flow with %d step(s) (max_attempts=%d, fail_fast=%s)",
            len(resolved),
            options.retry_policy.max_attempts,
            options.fail_fast,
        )

        for step in resolved:
            if self._stop_event.is_set():
                state.cancelled = True
                logger.warning(
                    "Flow stopped before step %s (%d of %d completed)",
                    step.name,
                    len(state),
                    len(resolved),
                )
                return

            cause: Optional[Exception] = None
            blocked_by = step.definition.failed_dependencies(state)
            if blocked_by:
                result = self._skipped_result(step, blocked_by)
            else:
                step_input = step.definition.resolve(state)
                result, cause = self._run_step(step, step_input, options)
            state.record(result)

            if result.succeeded:
                logger.info("Step %s succeeded (attempts=%d)", step.name, result.attempts)
                continue

            logger.warning(
                "Step %s failed with %d error issue(s)", step.name, len(result.errors)
            )
            if step.definition.effective_fail_fast(options.fail_fast):
                raise StepFailedError(step.name, result) from cause

    def _skipped_result(self, step: ResolvedStep, blocked_by: Tuple[str, ...]) -> StepResult:
        """Failed result for a step whose dependencies did not all succeed.

        The builder and the service are not called, so the result has no input.
        """
        logger.warning("Step %s skipped: dependencies %s did not succeed", step.name, list(blocked_by))
        issues = [
            Issue.error(
                step.name,
                f"dependency '{dependency}' did not succeed",
                detail={"dependency": dependency},
                suggestions=(f"Fix the failure reported for step '{dependency}'",),
            )
            for dependency in blocked_by
        ]
        return StepResult(
            step_name=step.name,
            input=None,
            issues=tuple(number_issues(step.name, issues)),
            succeeded=False,
            tool_kind=step.tool_kind,
        )

    def _resolve_default_options(self) -> FlowOptions:
        if self._options is not None:
            return self._options
        from toolflow.config.runtime_config import get_flow_options

        return get_flow_options()

    def _prepare(self, steps: Tuple[StepDefinition, ...]) -> List[ResolvedStep]:
        """Check declarations and bind each step to its constructor and validators."""
        check_declaration_order(steps)

        resolved = []
        for step in steps:
            if not self._registry.has_constructor(step.tool_kind):
                raise UnknownToolKindError(step.name, step.tool_kind)
            resolved.append(
                ResolvedStep(
                    definition=step,
                    constructor=self._registry.constructor_for(step.tool_kind),
                    validators=self._registry.validators_for(step.tool_kind) + step.validators,
                )
            )
        return resolved

    # ------------------------------------------------------------------
    # Single step
    # ------------------------------------------------------------------

    def _run_step(
        self,
        step: ResolvedStep,
        step_input: TypedInput,
        options: FlowOptions,
    ) -> Tuple[StepResult, Optional[Exception]]:
        """Execute, sanitize, construct and validate one step.

        Returns:
            The StepResult and the exception that caused a failure (if any).
        """
        policy = step.definition.retry_policy or options.retry_policy
        started = time.monotonic()
        attempts = 0

        def attempt() -> RawResult:
            nonlocal attempts
            attempts += 1
            return resolve_maybe_awaitable(self._service.execute(step_input))

        def on_retry(failed_attempt: int, error: Exception, delay: float) -> None:
            logger.warning(
                "Step %s attempt %d/%d failed: %s. Retrying in %.2fs",
                step.name,
                failed_attempt,
                policy.max_attempts,
                error,
                delay,
            )

        issues: List[Issue] = []
        output: Optional[TypedOutput] = None
        usage = TokenUsage()
        cause: Optional[Exception] = None

        try:
            raw = call_with_retry(
                attempt,
                policy,
                sleep=self._sleep,
                on_retry=on_retry,
            )
        except RetriesExhaustedError as exc:
            cause = exc.last_error
            logger.warning("Step %s: %s", step.name, exc.message)
            issues.append(
                Issue.error(
                    step.name,
                    f"execution failed after {exc.attempts} attempts",
                    detail={"error": str(exc.last_error), "error_type": type(exc.last_error).__name__},
                    suggestions=("Check backend availability and network connectivity",),
                )
            )
        except ValidationError as exc:
            cause = exc
            logger.warning("Step %s: input rejected by %s: %s", step.name, self._service.service_id, exc)
            issues.append(
                Issue.error(
                    step.name,
                    f"input rejected: {exc.message}",
                    detail=exc.detail,
                    suggestions=("Check the step's input builder and input parameters",),
                )
            )
        else:
            usage = raw.usage
            output, cause = self._construct_output(step, raw, issues)
            if output is not None:
                issues.extend(self._validate_output(step, output))

        issues = number_issues(step.name, issues)
        result = StepResult(
            step_name=step.name,
            input=step_input,
            output=output,
            issues=tuple(issues),
            succeeded=output is not None and not has_errors(issues),
            tool_kind=step.tool_kind,
            attempts=attempts,
            usage=usage,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return result, cause

    def _construct_output(
        self,
        step: ResolvedStep,
        raw: RawResult,
        issues: List[Issue],
    ) -> Tuple[Optional[TypedOutput], Optional[Exception]]:
        """Sanitize raw data, then build the typed output from it.

        ValidationErrors from the sanitizer or constructor are recorded as
        ERROR issues; the output is then None.
        """
        data: Dict[str, Any] = dict(raw.raw_data)
        try:
            if raw.sanitize is not None:
                logger.debug("Sanitizing raw output for step %s", step.name)
                data = raw.sanitize(data)
            return step.constructor(data), None
        except ValidationError as exc:
            logger.warning("Step %s: output construction failed: %s", step.name, exc)
            issues.append(
                Issue.error(
                    step.name,
                    f"output construction failed: {exc.message}",
                    detail=exc.detail,
                    suggestions=("Verify the backend response matches the output type for this tool kind",),
                )
            )
            return None, exc

    def _validate_output(self, step: ResolvedStep, output: TypedOutput) -> List[Issue]:
        """Run every validator bound to the step, in order."""
        found: List[Issue] = []
        for validator in step.validators:
            validator_name = getattr(validator, "__name__", type(validator).__name__)
            try:
                found.extend(validator(output))
            except Exception as exc:
                # A broken validator fails the step, not the run
                logger.warning("Step %s: validator %s raised %r", step.name, validator_name, exc)
                found.append(
                    Issue.error(
                        step.name,
                        f"validator {validator_name} failed: {exc}",
                        detail={"validator": validator_name, "error_type": type(exc).__name__},
                        suggestions=("Check the validator implementation against the output type",),
                    )
                )
        return found
