"""
Unit tests for SkillService.
Tests skill CRUD, skill log replacement and graduation state against the
row store.
"""

import pytest
from datetime import datetime, timedelta, timezone

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from tracker.core.database import InMemoryDatabase, RecordNotFoundError, SQLiteDatabase
from tracker.core.schema import init_database
from tracker.dashboard.workflows import SkillLogEntry
from tracker.services.action_logs import ActionLogService
from tracker.services.outcomes import OutcomeService
from tracker.skills.service import DuplicateSkillNameError, SkillService


@pytest.fixture(params=["memory", "sqlite"])
def db(request, tmp_path):
    if request.param == "memory":
        return InMemoryDatabase()
    db_file = tmp_path / "tracker.db"
    init_database(db_file)
    return SQLiteDatabase(db_file)


@pytest.fixture
def service(db):
    return SkillService(db)


@pytest.fixture
def outcome_id(db):
    return OutcomeService(db).create_outcome("Learn piano").id


@pytest.fixture
def action_log_id(db, outcome_id):
    output = OutcomeService(db).create_output(outcome_id, "Practice")
    return ActionLogService(db).save_action_log(output.id, "2024-06-10", 1, 1).action_log_id


class TestCreateSkill:
    """Tests for creating and editing skills."""

    def test_create_trims_and_normalizes(self, service, outcome_id):
        skill = service.create_skill_item(outcome_id, "  Scales  ", 2, "  ", float("nan"))
        assert skill.name == "Scales"
        assert skill.stage == "active"
        assert skill.target_label is None
        assert skill.target_value is None

    def test_blank_name_rejected(self, service, outcome_id):
        with pytest.raises(ValueError, match="name is required"):
            service.create_skill_item(outcome_id, "   ", 2)

    @pytest.mark.parametrize("confidence", [0, 6])
    def test_confidence_range(self, service, outcome_id, confidence):
        with pytest.raises(ValueError, match="between 1 and 5"):
            service.create_skill_item(outcome_id, "Scales", confidence)

    def test_duplicate_live_name_case_insensitive(self, service, outcome_id):
        service.create_skill_item(outcome_id, "Scales", 2)
        with pytest.raises(DuplicateSkillNameError) as exc_info:
            service.create_skill_item(outcome_id, "SCALES", 3)
        assert str(exc_info.value) == "A live skill with this name already exists for this outcome."

    def test_archived_name_can_be_reused(self, service, outcome_id):
        first = service.create_skill_item(outcome_id, "Scales", 2)
        service.set_skill_stage(first.id, "archived")
        second = service.create_skill_item(outcome_id, "Scales", 2)
        assert second.id != first.id

    def test_unarchive_into_duplicate_rejected(self, service, outcome_id):
        first = service.create_skill_item(outcome_id, "Scales", 2)
        service.set_skill_stage(first.id, "archived")
        service.create_skill_item(outcome_id, "Scales", 2)
        with pytest.raises(DuplicateSkillNameError):
            service.set_skill_stage(first.id, "active")

    def test_update_fields(self, service, outcome_id):
        skill = service.create_skill_item(outcome_id, "Scales", 2)
        updated = service.update_skill_item(skill.id, "Major scales", 3, "BPM", 120)
        assert updated.name == "Major scales"
        assert updated.initial_confidence == 3
        assert updated.target_label == "BPM"
        assert updated.target_value == 120

    def test_update_missing_skill(self, service):
        with pytest.raises(RecordNotFoundError):
            service.update_skill_item("nope", "x", 2)


class TestStages:
    """Tests for stage changes and graduation suppression."""

    def test_unknown_stage(self, service, outcome_id):
        skill = service.create_skill_item(outcome_id, "Scales", 2)
        with pytest.raises(ValueError):
            service.set_skill_stage(skill.id, "done")

    def test_missing_skill(self, service):
        with pytest.raises(RecordNotFoundError):
            service.set_skill_stage("nope", "archived")

    def test_review_clears_suppression(self, service, outcome_id):
        skill = service.create_skill_item(outcome_id, "Scales", 2)
        service.suppress_skill_graduation(skill.id, datetime(2024, 6, 10, tzinfo=timezone.utc))
        assert service.fetch_skill_by_id(skill.id).graduation_suppressed_at is not None

        moved = service.set_skill_stage(skill.id, "review")
        assert moved.stage == "review"
        assert moved.graduation_suppressed_at is None


class TestSkillLogs:
    """Tests for replacing the skill logs attached to an action log."""

    def test_insert_update_and_delete(self, service, outcome_id, action_log_id):
        a = service.create_skill_item(outcome_id, "Scales", 2)
        b = service.create_skill_item(outcome_id, "Chords", 2)

        created = service.replace_skill_logs_for_action(action_log_id, [
            SkillLogEntry(a.id, 3), SkillLogEntry(b.id, 4, 10.0),
        ])
        assert created == [a.id, b.id]

        created = service.replace_skill_logs_for_action(action_log_id, [SkillLogEntry(a.id, 5)])
        assert created == []

        logs = service.fetch_skill_logs_by_action_ids([action_log_id])
        assert len(logs) == 1
        assert logs[0].skill_item_id == a.id
        assert logs[0].confidence == 5

    def test_invalid_confidence_rejected(self, service, outcome_id, action_log_id):
        skill = service.create_skill_item(outcome_id, "Scales", 2)
        with pytest.raises(ValueError):
            service.replace_skill_logs_for_action(action_log_id, [SkillLogEntry(skill.id, 9)])
        assert service.fetch_skill_logs_by_action_ids([action_log_id]) == []

    def test_delete_by_action_log(self, service, outcome_id, action_log_id):
        skill = service.create_skill_item(outcome_id, "Scales", 2)
        service.replace_skill_logs_for_action(action_log_id, [SkillLogEntry(skill.id, 3)])
        assert service.delete_skill_logs_by_action_log_id(action_log_id) == 1
        assert service.fetch_skill_logs_for_skill(skill.id) == []

    def test_logs_newest_first_with_limit(self, db, service, outcome_id):
        skill = service.create_skill_item(outcome_id, "Scales", 2)
        outcomes = OutcomeService(db)
        output = outcomes.create_output(outcome_id, "Practice")
        logs = ActionLogService(db)
        base = datetime(2024, 6, 1, 9, tzinfo=timezone.utc)
        for day in range(3):
            log_id = logs.save_action_log(output.id, f"2024-06-0{day + 1}", 1, 1).action_log_id
            service.replace_skill_logs_for_action(
                log_id, [SkillLogEntry(skill.id, day + 2)], now=base + timedelta(days=day)
            )

        latest = service.fetch_skill_logs_for_skill(skill.id, limit=2)
        assert [log.confidence for log in latest] == [4, 3]

    def test_action_context(self, service, outcome_id, action_log_id):
        context = service.fetch_skill_action_context([action_log_id])
        assert context[action_log_id]["action_date"] == "2024-06-10"
        assert context[action_log_id]["output_description"] == "Practice"
        assert service.fetch_skill_action_context([]) == {}


class TestQueriesAndGraduation:
    """Tests for the read paths used by the dashboard."""

    def test_live_skills_only_for_outcomes(self, service, outcome_id):
        keep = service.create_skill_item(outcome_id, "Scales", 2)
        gone = service.create_skill_item(outcome_id, "Old", 2)
        service.set_skill_stage(gone.id, "archived")

        skills, _ = service.fetch_skills_for_outcomes([outcome_id])
        assert [skill.id for skill in skills] == [keep.id]

        every, _ = service.fetch_skills_for_outcome(outcome_id)
        assert len(every) == 2

    def test_graduation_after_three_confident_logs(self, db, service, outcome_id):
        skill = service.create_skill_item(outcome_id, "Scales", 2)
        output = OutcomeService(db).create_output(outcome_id, "Practice")
        logs = ActionLogService(db)
        today = datetime.now()

        for offset in (2, 1, 0):
            day = (today - timedelta(days=offset)).strftime("%Y-%m-%d")
            log_id = logs.save_action_log(output.id, day, 1, 1).action_log_id
            service.replace_skill_logs_for_action(
                log_id, [SkillLogEntry(skill.id, 4)],
                now=datetime.now(timezone.utc) - timedelta(days=offset),
            )
            if offset:
                assert not service.check_graduation_eligibility(skill.id)

        assert service.check_graduation_eligibility(skill.id)

        service.suppress_skill_graduation(skill.id, datetime.now(timezone.utc) + timedelta(seconds=1))
        assert not service.check_graduation_eligibility(skill.id)

    def test_graduation_orders_logs_by_instant(self, db, service, outcome_id):
        """A newer log written with a local offset still counts as the newest."""
        skill = service.create_skill_item(outcome_id, "Scales", 2)
        for logged_at, confidence in [
            ("2024-06-08T12:00:00+00:00", 5),
            ("2024-06-09T12:00:00+00:00", 5),
            ("2024-06-10T12:00:00+00:00", 5),
            ("2024-06-10T08:00:00-05:00", 2),
        ]:
            db.insert('skill_logs', {
                'skill_item_id': skill.id,
                'action_log_id': None,
                'confidence': confidence,
                'target_result': None,
                'logged_at': logged_at,
            })

        now = datetime(2024, 6, 12, 12, 0, tzinfo=timezone.utc)
        assert not service.check_graduation_eligibility(skill.id, now)

    def test_priority_queue_for_outcomes(self, service, outcome_id):
        service.create_skill_item(outcome_id, "Scales", 1)
        service.create_skill_item(outcome_id, "Chords", 5)
        queue = service.priority_queue_for_outcomes([outcome_id])
        assert [entry.skill.name for entry in queue] == ["Scales", "Chords"]

    def test_weekly_summary_by_outcome(self, service, outcome_id, action_log_id):
        skill = service.create_skill_item(outcome_id, "Scales", 2)
        service.replace_skill_logs_for_action(
            action_log_id, [SkillLogEntry(skill.id, 4)], now=datetime(2024, 6, 12, 12)
        )
        summary = service.compute_weekly_skill_summary_by_outcome(
            [outcome_id], "2024-06-10", "2024-06-16"
        )
        assert summary[outcome_id].skills_worked_count == 1
        assert summary[outcome_id].average_confidence_delta == 2
