"""
engines/ - Tool service abstraction for pluggable backends.

Interfaces:
- ToolService: Executes one step's typed input against a backend
- RawResult: Unparsed response plus optional sanitizer and token usage

Services:
- LocalToolService: Runs in-process compute functions per tool kind
- StubToolService: Canned responses for tests and CI

Usage:
    >>> from toolflow.runtime.engines import StubToolService
    >>> service = StubToolService({"generate_image": {"id": "img_1"}})
    >>> raw = service.execute(ImageGenerationInput(prompt="a lighthouse"))
"""

from .async_utils import resolve_maybe_awaitable, run_async_safely
from .base import RawResult, Sanitizer, ToolService
from .local import LocalToolService
from .stubs import StubToolService

__all__ = [
    # Interfaces
    "ToolService",
    "RawResult",
    "Sanitizer",
    # Services
    "LocalToolService",
    "StubToolService",
    # Async bridge
    "run_async_safely",
    "resolve_maybe_awaitable",
]
