"""Tests for StepResult, TokenUsage and PipelineState."""

from __future__ import annotations

import dataclasses

import pytest

from toolflow.runtime import DuplicateStepError, Issue, PipelineState, StepResult, TokenUsage
from toolflow.tools import ImageGenerationInput, ImageGenerationOutput


def make_result(name="generate", image_id="img_1", issues=(), succeeded=True, usage=None):
    return StepResult(
        step_name=name,
        input=ImageGenerationInput(prompt="a lighthouse"),
        output=ImageGenerationOutput(id=image_id) if image_id else None,
        issues=tuple(issues),
        succeeded=succeeded,
        tool_kind="generate_image",
        attempts=1,
        usage=usage or TokenUsage(),
    )


class TestTokenUsage:
    def test_from_mapping_computes_total(self):
        usage = TokenUsage.from_mapping({"prompt_tokens": 7, "completion_tokens": 3})

        assert usage == TokenUsage(prompt_tokens=7, completion_tokens=3, total_tokens=10)

    def test_from_mapping_keeps_reported_total(self):
        usage = TokenUsage.from_mapping({"prompt_tokens": 7, "completion_tokens": 3, "total_tokens": 12})

        assert usage.total_tokens == 12

    def test_from_empty_mapping(self):
        assert TokenUsage.from_mapping(None) == TokenUsage()
        assert TokenUsage.from_mapping({}) == TokenUsage()

    def test_addition(self):
        total = TokenUsage(1, 2, 3) + TokenUsage(10, 20, 30)

        assert total.to_dict() == {"prompt_tokens": 11, "completion_tokens": 22, "total_tokens": 33}


class TestStepResult:
    def test_is_immutable(self):
        result = make_result()

        with pytest.raises(dataclasses.FrozenInstanceError):
            result.succeeded = False

    def test_replace_changes_one_field(self):
        result = make_result()
        replaced = result.replace(output=ImageGenerationOutput(id="img_9"))

        assert replaced.output.id == "img_9"
        assert result.output.id == "img_1"
        assert replaced.input == result.input
        assert replaced.step_name == result.step_name

    def test_issue_queries(self):
        result = make_result(
            issues=[Issue.warning("generate", "slow"), Issue.error("generate", "bad"), Issue.warning("generate", "odd")],
            succeeded=False,
        )

        assert [issue.message for issue in result.warnings] == ["slow", "odd"]
        assert [issue.message for issue in result.errors] == ["bad"]
        assert result.has_errors is True

    def test_duration_is_not_part_of_equality(self):
        assert make_result().replace(duration_ms=5) == make_result().replace(duration_ms=900)

    def test_to_dict(self):
        data = make_result().to_dict()

        assert data["step_name"] == "generate"
        assert data["succeeded"] is True
        assert data["input"]["prompt"] == "a lighthouse"
        assert data["output"] == {"id": "img_1", "created": 0, "data": []}
        assert data["issues"] == []

    def test_to_dict_without_output(self):
        assert make_result(image_id=None, succeeded=False).to_dict()["output"] is None

    def test_to_dict_for_skipped_step(self):
        """A step skipped for a failed dependency has no input."""
        skipped = make_result(image_id=None, succeeded=False).replace(input=None, attempts=0)

        data = skipped.to_dict()

        assert data["input"] is None
        assert data["attempts"] == 0


class TestPipelineState:
    def test_records_in_insertion_order(self):
        state = PipelineState()
        state.record(make_result("b"))
        state.record(make_result("a"))

        assert state.names() == ("b", "a")
        assert [result.step_name for result in state] == ["b", "a"]
        assert len(state) == 2
        assert "a" in state
        assert "c" not in state

    def test_get_missing_returns_none(self):
        assert PipelineState().get("nope") is None

    def test_duplicate_record_rejected(self):
        state = PipelineState([make_result("a")])

        with pytest.raises(DuplicateStepError):
            state.record(make_result("a"))

    def test_all_results_is_a_copy(self):
        state = PipelineState([make_result("a")])
        results = state.all_results()
        state.record(make_result("b"))

        assert len(results) == 1

    def test_snapshot_is_independent(self):
        state = PipelineState([make_result("a")])
        snapshot = state.snapshot()
        state.record(make_result("b"))

        assert snapshot.names() == ("a",)
        assert state.names() == ("a", "b")

    def test_succeeded_and_failed_results(self):
        state = PipelineState([make_result("a"), make_result("b", image_id=None, succeeded=False)])

        assert state.succeeded is False
        assert [result.step_name for result in state.failed_results()] == ["b"]

    def test_empty_state_succeeded(self):
        assert PipelineState().succeeded is True

    def test_all_issues_and_usage(self):
        state = PipelineState(
            [
                make_result("a", issues=[Issue.warning("a", "w")], usage=TokenUsage(1, 1, 2)),
                make_result("b", issues=[Issue.warning("b", "x")], usage=TokenUsage(3, 1, 4)),
            ]
        )

        assert [issue.step_name for issue in state.all_issues()] == ["a", "b"]
        assert state.token_usage() == TokenUsage(4, 2, 6)

    def test_equality_includes_cancelled(self):
        first = PipelineState([make_result("a")])
        second = PipelineState([make_result("a")])
        assert first == second

        second.cancelled = True
        assert first != second

    def test_to_dict(self):
        state = PipelineState([make_result("a", issues=[Issue.warning("a", "w", id="a:1")])])

        data = state.to_dict()

        assert data["succeeded"] is True
        assert data["cancelled"] is False
        assert data["issue_count"] == 1
        assert [step["step_name"] for step in data["steps"]] == ["a"]
