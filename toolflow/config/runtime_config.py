"""Runtime configuration registry for flow execution.

Provides centralized defaults for retry behavior, fail-fast mode and
request parameters. Environment variables take precedence over YAML config.

Usage:
    from toolflow.config.runtime_config import get_flow_options, get_default_model

    options = get_flow_options()   # FlowOptions built from runtime.yaml + env
    model = get_default_model()    # e.g. "gpt-4.1"
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from toolflow.runtime.stepwise.models import FlowOptions
from toolflow.runtime.stepwise.retry import (
    Backoff,
    RetryPolicy,
    constant_backoff,
    exponential_backoff,
    no_backoff,
)

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).parent / "runtime.yaml"
_cached_config: Optional[Dict[str, Any]] = None

MIN_ATTEMPTS = 1
MAX_ATTEMPTS = 20

_TRUTHY = ("1", "true", "yes", "on")


def _clamp_attempts(value: int) -> int:
    """Clamp max_attempts to [MIN_ATTEMPTS, MAX_ATTEMPTS] with logging."""
    if value < MIN_ATTEMPTS:
        logger.warning(
            "retry.max_attempts value %d is below minimum %d. Clamping to %d.",
            value,
            MIN_ATTEMPTS,
            MIN_ATTEMPTS,
        )
        return MIN_ATTEMPTS
    if value > MAX_ATTEMPTS:
        logger.warning(
            "retry.max_attempts value %d exceeds maximum %d. Clamping to %d.",
            value,
            MAX_ATTEMPTS,
            MAX_ATTEMPTS,
        )
        return MAX_ATTEMPTS
    return value


def _load_config() -> Dict[str, Any]:
    """Load runtime.yaml configuration, with caching."""
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            _cached_config = yaml.safe_load(f) or {}
    else:
        _cached_config = _default_config()

    return _cached_config


def _default_config() -> Dict[str, Any]:
    """Return default configuration if runtime.yaml doesn't exist."""
    return {
        "version": "1.0",
        "retry": {
            "max_attempts": 3,
            "backoff": {
                "kind": "exponential",
                "base_seconds": 0.5,
                "factor": 2.0,
                "max_seconds": 30.0,
            },
        },
        "flow": {"fail_fast": False},
        "defaults": {
            "model": "gpt-4.1",
            "temperature": 0.7,
            "max_tokens": 2000,
            "image_model": "dall-e-3",
        },
    }


def reset_config() -> None:
    """Reset cached config (for testing)."""
    global _cached_config
    _cached_config = None


def _section(name: str) -> Dict[str, Any]:
    return _load_config().get(name) or {}


def get_max_attempts() -> int:
    """Get the attempt limit per step.

    Checks TOOLFLOW_MAX_ATTEMPTS first, then retry.max_attempts.
    """
    env_value = os.environ.get("TOOLFLOW_MAX_ATTEMPTS")
    if env_value:
        try:
            return _clamp_attempts(int(env_value))
        except ValueError:
            logger.warning("Ignoring non-integer TOOLFLOW_MAX_ATTEMPTS=%r", env_value)
    return _clamp_attempts(int(_section("retry").get("max_attempts", 3)))


def get_backoff() -> Backoff:
    """Build the backoff function from retry.backoff.

    TOOLFLOW_BACKOFF_BASE_SECONDS overrides base_seconds.
    """
    settings = _section("retry").get("backoff") or {}
    kind = str(settings.get("kind", "exponential")).lower()
    base = float(settings.get("base_seconds", 0.5))

    env_base = os.environ.get("TOOLFLOW_BACKOFF_BASE_SECONDS")
    if env_base:
        try:
            base = float(env_base)
        except ValueError:
            logger.warning("Ignoring non-numeric TOOLFLOW_BACKOFF_BASE_SECONDS=%r", env_base)

    if kind == "none":
        return no_backoff
    if kind == "constant":
        return constant_backoff(base)
    if kind != "exponential":
        logger.warning("Unknown backoff kind %r, using exponential", kind)
    return exponential_backoff(
        base_seconds=base,
        factor=float(settings.get("factor", 2.0)),
        max_seconds=float(settings.get("max_seconds", 30.0)),
    )


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=get_max_attempts(), backoff=get_backoff())


def get_fail_fast() -> bool:
    """Check TOOLFLOW_FAIL_FAST first, then flow.fail_fast."""
    env_value = os.environ.get("TOOLFLOW_FAIL_FAST")
    if env_value is not None and env_value != "":
        return env_value.strip().lower() in _TRUTHY
    return bool(_section("flow").get("fail_fast", False))


def get_flow_options() -> FlowOptions:
    """Build FlowOptions from configuration."""
    return FlowOptions(retry_policy=get_retry_policy(), fail_fast=get_fail_fast())


def get_default_model() -> str:
    """Get the default chat model (TOOLFLOW_MODEL overrides YAML)."""
    return os.environ.get("TOOLFLOW_MODEL") or str(_section("defaults").get("model", "gpt-4.1"))


def get_request_defaults() -> Dict[str, Any]:
    """Get default request parameters (model, temperature, max_tokens, image_model)."""
    defaults = dict(_section("defaults"))
    defaults["model"] = get_default_model()
    return defaults
