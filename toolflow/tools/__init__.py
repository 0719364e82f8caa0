"""
tools/ - Tool-kind variants shipped with toolflow.

Each tool kind pairs a TypedInput with a TypedOutput:
- chat_completion: ChatCompletionInput -> ChatCompletionOutput
- generate_image: ImageGenerationInput -> ImageGenerationOutput
- edit_image: ImageEditInput -> ImageEditOutput

builtin_registry() returns a fresh OutputRegistry with all of them, so
callers can add their own kinds without affecting other runs.
"""

from toolflow.runtime.stepwise.registry import OutputRegistry

from .chat import (
    CHAT_COMPLETION,
    ChatCompletionInput,
    ChatCompletionOutput,
    ChatMessage,
    flatten_chat_response,
)
from .images import (
    EDIT_IMAGE,
    GENERATE_IMAGE,
    ImageData,
    ImageEditInput,
    ImageEditOutput,
    ImageGenerationInput,
    ImageGenerationOutput,
)


def builtin_registry() -> OutputRegistry:
    """Return a new registry with the built-in tool kinds."""
    return OutputRegistry.from_outputs(
        ChatCompletionOutput,
        ImageGenerationOutput,
        ImageEditOutput,
    )


__all__ = [
    "builtin_registry",
    # Chat
    "CHAT_COMPLETION",
    "ChatMessage",
    "ChatCompletionInput",
    "ChatCompletionOutput",
    "flatten_chat_response",
    # Images
    "GENERATE_IMAGE",
    "EDIT_IMAGE",
    "ImageData",
    "ImageGenerationInput",
    "ImageGenerationOutput",
    "ImageEditInput",
    "ImageEditOutput",
]
