"""
Unit tests for the daily logging workflows.
"""

import pytest
from unittest.mock import MagicMock

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from tracker.core.models import ActionLog, Output, SkillItem, SkillLog
from tracker.dashboard.workflows import (
    LogDraft,
    SkillLogDraft,
    SkillLogEntry,
    build_selected_skill_entries,
    build_skill_drafts_from_existing_logs,
    create_log_draft,
    frequency_description,
    run_graduation_prompt_flow,
    score_label,
)


class TestLogDraft:
    """Tests for prefilling the log form."""

    def test_from_existing_log(self):
        log = ActionLog(completed=1, total=2, notes=None)
        assert create_log_draft(Output(), log) == LogDraft(completed=1, total=2, notes="")

    def test_flexible_defaults_to_weekly_target(self):
        output = Output(frequency_type="flexible_weekly", frequency_value=4)
        assert create_log_draft(output) == LogDraft(completed=0, total=4, notes="")

    def test_daily_defaults_to_one(self):
        assert create_log_draft(Output(frequency_type="daily")).total == 1


class TestLabels:
    """Tests for display helpers."""

    def test_frequency_descriptions(self):
        assert frequency_description(Output(frequency_type="daily")) == "Daily"
        assert frequency_description(
            Output(frequency_type="flexible_weekly", frequency_value=3)
        ) == "3x/week (flexible)"
        assert frequency_description(
            Output(frequency_type="fixed_weekly", schedule_weekdays=[1, 3])
        ) == "Fixed weekly (Mon, Wed)"

    def test_score_label(self):
        assert score_label(None) == "n/a"
        assert score_label(52.5) == "53"


class TestSkillDrafts:
    """Tests for building and validating skill log drafts."""

    def test_existing_logs_preselect(self):
        skills = [SkillItem(id="a"), SkillItem(id="b")]
        existing = [SkillLog(skill_item_id="a", confidence=4, target_result=12.0)]
        drafts = build_skill_drafts_from_existing_logs(skills, existing)

        assert drafts["a"] == SkillLogDraft(selected=True, confidence=4, target_result="12")
        assert drafts["b"] == SkillLogDraft()

    def test_fractional_target_kept(self):
        drafts = build_skill_drafts_from_existing_logs(
            [SkillItem(id="a")], [SkillLog(skill_item_id="a", confidence=3, target_result=2.5)]
        )
        assert drafts["a"].target_result == "2.5"

    def test_only_selected_become_entries(self):
        entries, error = build_selected_skill_entries({
            "a": SkillLogDraft(selected=True, confidence=4, target_result=" 10 "),
            "b": SkillLogDraft(selected=False, confidence=2),
            "c": SkillLogDraft(selected=True, confidence=3, target_result=""),
        })
        assert error is None
        assert entries == [SkillLogEntry("a", 4, 10.0), SkillLogEntry("c", 3, None)]

    def test_non_numeric_target(self):
        entries, error = build_selected_skill_entries({
            "a": SkillLogDraft(selected=True, confidence=4, target_result="lots"),
        })
        assert entries == []
        assert error == "Target result must be numeric for selected skills."

    def test_confidence_out_of_range(self):
        entries, error = build_selected_skill_entries({
            "a": SkillLogDraft(selected=True, confidence=6),
        })
        assert entries == []
        assert error == "Confidence must be between 1 and 5."


class TestGraduationPrompt:
    """Tests for prompting newly eligible skills."""

    @pytest.fixture
    def calls(self):
        return {"moved": [], "suppressed": [], "prompts": []}

    def run(self, calls, eligible, answers):
        skills = [SkillItem(id="a", name="Scales"), SkillItem(id="b", name="Chords")]
        replies = iter(answers)

        def confirm(message):
            calls["prompts"].append(message)
            return next(replies)

        return run_graduation_prompt_flow(
            created_skill_ids=["a", "b"],
            skills=skills,
            is_skill_eligible=lambda skill_id: skill_id in eligible,
            move_to_review=calls["moved"].append,
            suppress_graduation=calls["suppressed"].append,
            confirm_move_to_review=confirm,
        )

    def test_accept_moves_to_review(self, calls):
        moved = self.run(calls, eligible={"a"}, answers=[True])
        assert moved == ["a"]
        assert calls["moved"] == ["a"]
        assert calls["suppressed"] == []
        assert calls["prompts"][0].startswith("Scales qualifies for review")

    def test_decline_suppresses(self, calls):
        moved = self.run(calls, eligible={"a", "b"}, answers=[False, True])
        assert moved == ["b"]
        assert calls["suppressed"] == ["a"]

    def test_ineligible_not_prompted(self, calls):
        assert self.run(calls, eligible=set(), answers=[]) == []
        assert calls["prompts"] == []

    def test_callbacks_receive_skill_ids(self):
        move = MagicMock()
        suppress = MagicMock()
        confirm = MagicMock(return_value=True)

        moved = run_graduation_prompt_flow(
            created_skill_ids=["x"],
            skills=[],
            is_skill_eligible=MagicMock(return_value=True),
            move_to_review=move,
            suppress_graduation=suppress,
            confirm_move_to_review=confirm,
        )

        assert moved == ["x"]
        move.assert_called_once_with("x")
        suppress.assert_not_called()
        assert confirm.call_args[0][0].startswith("This skill qualifies")
