"""Tests for OutputRegistry."""

import pytest

from toolflow.runtime import OutputRegistry, TypedOutput
from toolflow.tools import ImageEditOutput, ImageGenerationOutput


def no_issues(output):
    return []


class TestOutputRegistry:
    def test_from_outputs_keys_by_tool_kind(self):
        registry = OutputRegistry.from_outputs(ImageGenerationOutput, ImageEditOutput)

        assert registry.tool_kinds == ("generate_image", "edit_image")
        assert registry.has_constructor("edit_image") is True
        assert registry.has_constructor("chat_completion") is False

    def test_constructor_for_unknown_kind(self):
        with pytest.raises(KeyError):
            OutputRegistry().constructor_for("generate_image")

    def test_register_output_requires_tool_kind(self):
        with pytest.raises(ValueError, match="tool_kind"):
            OutputRegistry().register_output(TypedOutput)

    def test_register_rejects_empty_kind(self):
        with pytest.raises(ValueError):
            OutputRegistry().register("", ImageGenerationOutput.from_payload)

    def test_validators_keep_registration_order(self):
        def second(output):
            return []

        registry = OutputRegistry()
        registry.register_output(ImageGenerationOutput, validators=[no_issues])
        registry.add_validator("generate_image", second)

        assert registry.validators_for("generate_image") == (no_issues, second)
        assert registry.validators_for("edit_image") == ()

    def test_reregistering_keeps_validators(self):
        registry = OutputRegistry()
        registry.register_output(ImageGenerationOutput, validators=[no_issues])
        registry.register("generate_image", ImageEditOutput.from_payload)

        assert registry.validators_for("generate_image") == (no_issues,)
        assert isinstance(registry.constructor_for("generate_image")({"id": "x"}), ImageEditOutput)

    def test_copy_is_independent(self):
        original = OutputRegistry.from_outputs(ImageGenerationOutput)
        clone = original.copy()
        clone.register_output(ImageEditOutput)
        clone.add_validator("generate_image", no_issues)

        assert original.tool_kinds == ("generate_image",)
        assert original.validators_for("generate_image") == ()
