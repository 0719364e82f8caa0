"""
Test fixtures and utilities for toolflow tests.

Provides stub services, step factories for the image generate/edit
scenario, a recording sleep function so retry tests never wait, and an
autouse fixture that isolates runtime configuration between tests.
"""

import sys
from pathlib import Path
from typing import List

import pytest

# Add repo root to path for imports
_repo_root = Path(__file__).resolve().parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

from toolflow.config.runtime_config import reset_config
from toolflow.runtime import (
    FlowEngine,
    FlowOptions,
    RetryPolicy,
    StepDefinition,
    StubToolService,
)
from toolflow.tools import ImageEditInput, ImageGenerationInput, builtin_registry

CONFIG_ENV_VARS = (
    "TOOLFLOW_MAX_ATTEMPTS",
    "TOOLFLOW_FAIL_FAST",
    "TOOLFLOW_BACKOFF_BASE_SECONDS",
    "TOOLFLOW_MODEL",
)


# ============================================================================
# Configuration isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Clear toolflow env overrides and the cached runtime.yaml for every test."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


# ============================================================================
# Step factories
# ============================================================================


def generate_step(name: str = "generate", prompt: str = "a lighthouse at dusk") -> StepDefinition:
    """Dependency-free image generation step."""
    return StepDefinition.fixed(name, ImageGenerationInput(prompt=prompt))


def edit_step(name: str = "edit", depends_on=("generate",), prompt: str = "add fog") -> StepDefinition:
    """Image edit step that reads the image id from its first dependency."""
    return StepDefinition(
        name=name,
        tool_kind="edit_image",
        depends_on=depends_on,
        input_builder=lambda results: ImageEditInput(image_id=results[0].output.id, prompt=prompt),
    )


class RecordingSleep:
    """Sleep replacement that records requested delays instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def registry():
    return builtin_registry()


@pytest.fixture
def image_service():
    """Stub returning deterministic payloads for generate and edit."""
    return StubToolService(
        {
            "generate_image": {"id": "img_1", "created": 1700000000},
            "edit_image": {"id": "img_2", "created": 1700000100},
        }
    )


@pytest.fixture
def options():
    """Three attempts, constant backoff, continue on failure."""
    return FlowOptions(retry_policy=RetryPolicy(max_attempts=3, backoff=lambda attempt: 0.25))


@pytest.fixture
def make_engine(registry, options, sleep):
    """Factory building a FlowEngine around a service with test defaults."""

    def factory(service, **kwargs):
        kwargs.setdefault("options", options)
        kwargs.setdefault("sleep", sleep)
        return FlowEngine(service, kwargs.pop("registry", registry), **kwargs)

    return factory
