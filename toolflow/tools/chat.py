"""Typed input and output for chat completion with a forced tool call.

The output carries the assistant text and the parsed arguments of the
tool call. flatten_chat_response() is a sanitizer that reduces a raw
chat-completion response body to that flat shape.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar, Dict, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from toolflow.config.runtime_config import get_request_defaults
from toolflow.runtime.errors import ValidationError
from toolflow.runtime.types import TypedInput, TypedOutput

CHAT_COMPLETION = "chat_completion"


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    role: Literal["system", "user", "assistant", "tool"]
    content: str


class ChatCompletionInput(TypedInput):
    """Chat request, optionally forcing a call to one function tool.

    Attributes:
        messages: Conversation so far; at least one message.
        model: Model identifier.
        temperature: Sampling temperature in [0, 2].
        max_tokens: Completion token limit.
        tool_name: Function tool the model must call, if any.
        tool_schema: JSON Schema of that tool's arguments.
    """

    tool_kind: ClassVar[str] = CHAT_COMPLETION

    messages: Tuple[ChatMessage, ...] = Field(min_length=1)
    model: str = "gpt-4.1"
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    tool_name: Optional[str] = None
    tool_schema: Optional[Dict[str, Any]] = None

    @classmethod
    def from_prompt(
        cls,
        prompt: str,
        system: Optional[str] = None,
        **overrides: Any,
    ) -> "ChatCompletionInput":
        """Build a request from a user prompt, filling model defaults from config."""
        defaults = get_request_defaults()
        messages = []
        if system:
            messages.append(ChatMessage(role="system", content=system))
        messages.append(ChatMessage(role="user", content=prompt))
        params: Dict[str, Any] = {
            "model": defaults.get("model"),
            "temperature": defaults.get("temperature"),
            "max_tokens": defaults.get("max_tokens"),
        }
        params.update(overrides)
        return cls(messages=tuple(messages), **{k: v for k, v in params.items() if v is not None})


class ChatCompletionOutput(TypedOutput):
    """Parsed chat completion.

    ``arguments`` accepts either a mapping or the JSON string the provider
    returns for tool-call arguments.
    """

    tool_kind: ClassVar[str] = CHAT_COMPLETION

    content: str = ""
    arguments: Dict[str, Any] = Field(default_factory=dict)
    finish_reason: Optional[str] = None
    model: Optional[str] = None

    @field_validator("arguments", mode="before")
    @classmethod
    def _parse_arguments(cls, value: Any) -> Any:
        if isinstance(value, str):
            if not value.strip():
                return {}
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError(f"tool arguments are not valid JSON: {exc.msg}") from exc
        return value


def _expect_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(
            f"chat response {where} is not an object",
            detail={"path": where, "type": type(value).__name__},
        )
    return value


def flatten_chat_response(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitizer: reduce a chat-completion response body to ChatCompletionOutput's shape.

    Takes the first choice; the first tool call's arguments become
    ``arguments``. Bodies that are already flat pass through unchanged.

    Raises:
        ValidationError: If ``choices`` is empty or not a list, or if the
            choice, message, tool call or function has the wrong shape.
    """
    if "choices" not in raw:
        return raw
    choices = raw.get("choices") or []
    if not isinstance(choices, list):
        raise ValidationError(
            "chat response choices is not a list",
            detail={"path": "choices", "type": type(choices).__name__},
        )
    if not choices:
        raise ValidationError("chat response has no choices", detail={"keys": sorted(raw)})

    choice = _expect_mapping(choices[0], "choices[0]")
    message = _expect_mapping(choice.get("message") or {}, "choices[0].message")
    flat: Dict[str, Any] = {
        "content": message.get("content") or "",
        "finish_reason": choice.get("finish_reason"),
        "model": raw.get("model"),
    }
    tool_calls = message.get("tool_calls") or []
    if not isinstance(tool_calls, list):
        raise ValidationError(
            "chat response tool_calls is not a list",
            detail={"path": "choices[0].message.tool_calls", "type": type(tool_calls).__name__},
        )
    if tool_calls:
        call = _expect_mapping(tool_calls[0], "choices[0].message.tool_calls[0]")
        function = _expect_mapping(call.get("function") or {}, "choices[0].message.tool_calls[0].function")
        flat["arguments"] = function.get("arguments", {})
    return flat
