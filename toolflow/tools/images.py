"""Typed inputs and outputs for image generation and image editing.

Generation and editing share one output shape: the provider's image id,
a creation timestamp and a list of images (URL or base64 payload).
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from toolflow.config.runtime_config import get_request_defaults
from toolflow.runtime.types import TypedInput, TypedOutput

GENERATE_IMAGE = "generate_image"
EDIT_IMAGE = "edit_image"

GENERATION_SIZES = (
    "256x256",
    "512x512",
    "1024x1024",
    "1536x1024",
    "1024x1536",
    "1792x1024",
    "1024x1792",
    "auto",
)
EDIT_SIZES = ("256x256", "512x512", "1024x1024", "1536x1024", "1024x1536", "auto")
QUALITIES = ("standard", "hd", "low", "medium", "high", "auto")
STYLES = ("vivid", "natural")
RESPONSE_FORMATS = ("url", "b64_json")


def _check_choice(value: Optional[str], allowed: Tuple[str, ...], name: str) -> Optional[str]:
    if value is not None and value not in allowed:
        raise ValueError(f"{name} must be one of: {', '.join(allowed)}")
    return value


class ImageData(BaseModel):
    """One generated or edited image."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: Optional[str] = None
    b64_json: Optional[str] = None
    revised_prompt: Optional[str] = None

    @model_validator(mode="after")
    def _require_content(self) -> "ImageData":
        if self.url is None and self.b64_json is None:
            raise ValueError("image data must have either url or b64_json")
        return self


class ImageGenerationInput(TypedInput):
    """Request for a new image from a text prompt."""

    tool_kind: ClassVar[str] = GENERATE_IMAGE

    prompt: str = Field(min_length=1, max_length=4000)
    model: str = "dall-e-3"
    n: int = Field(default=1, ge=1, le=10)
    size: Optional[str] = None
    quality: Optional[str] = None
    style: Optional[str] = None
    response_format: Optional[str] = None
    user: Optional[str] = None

    @classmethod
    def from_prompt(cls, prompt: str, **overrides: Any) -> "ImageGenerationInput":
        """Build a request using the configured default image model."""
        model = get_request_defaults().get("image_model")
        if model and "model" not in overrides:
            overrides["model"] = model
        return cls(prompt=prompt, **overrides)

    @field_validator("size")
    @classmethod
    def _check_size(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, GENERATION_SIZES, "size")

    @field_validator("quality")
    @classmethod
    def _check_quality(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, QUALITIES, "quality")

    @field_validator("style")
    @classmethod
    def _check_style(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, STYLES, "style")

    @field_validator("response_format")
    @classmethod
    def _check_response_format(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, RESPONSE_FORMATS, "response_format")


class ImageEditInput(TypedInput):
    """Request to edit a previously produced image."""

    tool_kind: ClassVar[str] = EDIT_IMAGE

    image_id: str = Field(min_length=1)
    prompt: str = Field(min_length=1, max_length=32000)
    mask_id: Optional[str] = None
    model: str = "gpt-image-1"
    n: int = Field(default=1, ge=1, le=10)
    size: Optional[str] = None
    response_format: Optional[str] = None
    user: Optional[str] = None

    @field_validator("size")
    @classmethod
    def _check_size(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, EDIT_SIZES, "size")

    @field_validator("response_format")
    @classmethod
    def _check_response_format(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, RESPONSE_FORMATS, "response_format")


class ImageOutput(TypedOutput):
    """Shared output shape for image tools."""

    id: str = Field(min_length=1)
    created: int = 0
    data: Tuple[ImageData, ...] = ()

    @property
    def urls(self) -> Tuple[str, ...]:
        return tuple(image.url for image in self.data if image.url is not None)


class ImageGenerationOutput(ImageOutput):
    tool_kind: ClassVar[str] = GENERATE_IMAGE


class ImageEditOutput(ImageOutput):
    tool_kind: ClassVar[str] = EDIT_IMAGE
