"""Tests for Issue records and severity parsing."""

import pytest

from toolflow.runtime.types import Issue, IssueSeverity, has_errors, number_issues


class TestIssueSeverity:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("warning", IssueSeverity.WARNING),
            ("WARN", IssueSeverity.WARNING),
            ("low", IssueSeverity.WARNING),
            ("Medium", IssueSeverity.WARNING),
            ("error", IssueSeverity.ERROR),
            ("high", IssueSeverity.ERROR),
            (" CRITICAL ", IssueSeverity.ERROR),
        ],
    )
    def test_from_string(self, value, expected):
        assert IssueSeverity.from_string(value) is expected

    def test_from_string_rejects_unknown(self):
        with pytest.raises(ValueError):
            IssueSeverity.from_string("fatal")


class TestIssue:
    def test_constructors_set_severity(self):
        assert Issue.warning("s", "m").severity is IssueSeverity.WARNING
        assert Issue.error("s", "m").is_error is True

    def test_dict_round_trip_keeps_suggestions(self):
        issue = Issue.error(
            "edit",
            "mask does not match image size",
            detail={"mask": "256x256"},
            id="edit:1",
            suggestions=("Resize the mask", "Drop the mask"),
        )

        data = issue.to_dict()

        assert data["severity"] == "error"
        assert data["suggestions"] == ["Resize the mask", "Drop the mask"]
        assert Issue.from_dict(data) == issue

    def test_to_dict_omits_empty_optional_fields(self):
        assert set(Issue.warning("s", "m").to_dict()) == {"id", "step_name", "severity", "message"}

    def test_has_errors(self):
        assert has_errors([Issue.warning("s", "w"), Issue.error("s", "e")]) is True
        assert has_errors([Issue.warning("s", "w")]) is False
        assert has_errors([]) is False


class TestNumberIssues:
    def test_assigns_ids_and_step_name(self):
        numbered = number_issues("generate", [Issue.warning("", "a"), Issue.error("", "b")])

        assert [issue.id for issue in numbered] == ["generate:1", "generate:2"]
        assert {issue.step_name for issue in numbered} == {"generate"}

    def test_keeps_explicit_values(self):
        issue = Issue.warning("other", "a", id="custom")

        assert number_issues("generate", [issue]) == [issue]
