"""Tests for the TypedInput/TypedOutput contracts."""

from __future__ import annotations

from typing import ClassVar, Optional

import pydantic
import pytest

from toolflow.runtime import TypedInput, TypedOutput, ValidationError


class WordCountInput(TypedInput):
    tool_kind: ClassVar[str] = "word_count"

    text: str
    language: str = "en"
    max_words: Optional[int] = pydantic.Field(default=None, alias="maxWords")


class WordCountOutput(TypedOutput):
    tool_kind: ClassVar[str] = "word_count"

    count: int
    language: str = "en"


class TestTypedInput:
    def test_encode_uses_aliases_and_drops_none(self):
        encoded = WordCountInput(text="one two", max_words=5).encode()

        assert encoded == {"text": "one two", "language": "en", "maxWords": 5}
        assert "maxWords" not in WordCountInput(text="x").encode()

    def test_decode_accepts_transport_representation(self):
        decoded = WordCountInput.decode({"text": "a b c", "maxWords": 2})

        assert decoded == WordCountInput(text="a b c", max_words=2)

    def test_decode_rejects_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            WordCountInput.decode({"language": "fr"})

        assert exc_info.value.detail[0]["loc"] == ["text"]
        assert "WordCountInput" in exc_info.value.message

    def test_decode_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            WordCountInput.decode({"text": "x", "colour": "red"})

    def test_inputs_are_frozen(self):
        step_input = WordCountInput(text="x")

        with pytest.raises(pydantic.ValidationError):
            step_input.text = "y"

    def test_tool_kind_is_not_a_field(self):
        assert "tool_kind" not in WordCountInput(text="x").encode()
        assert WordCountInput.tool_kind == "word_count"


class TestTypedOutput:
    def test_from_payload_ignores_unknown_keys(self):
        output = WordCountOutput.from_payload({"count": 3, "provider_trace": "abc"})

        assert output.count == 3
        assert output.to_payload() == {"count": 3, "language": "en"}

    def test_from_payload_wraps_pydantic_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            WordCountOutput.from_payload({"count": "many"})

        assert exc_info.value.detail[0]["loc"] == ["count"]
        assert isinstance(exc_info.value.__cause__, pydantic.ValidationError)

    def test_from_payload_requires_mapping(self):
        with pytest.raises(ValidationError, match="expected a mapping"):
            WordCountOutput.from_payload(["count", 3])
