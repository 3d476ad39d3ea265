"""
Skill persistence: skill items, skill logs and graduation state.

Wraps the row store with the queries the dashboard, CLI and API need and
hands the loaded rows to the pure priority / summary functions.
"""

import math
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from tracker.core.database import ConstraintViolationError, RecordNotFoundError, eq, in_
from tracker.core.dates import to_instant
from tracker.core.models import SKILL_STAGES, SkillItem, SkillLog
from tracker.services.base_service import BaseService
from tracker.skills.priority import (
    SkillPriority,
    compute_priority_queue,
    is_skill_eligible_for_graduation,
)
from tracker.skills.weekly_summary import SkillSummary, compute_weekly_skill_summary_from_data

LIVE_NAME_INDEX = "skill_items_outcome_name_live_unique_idx"
DUPLICATE_NAME_MESSAGE = "A live skill with this name already exists for this outcome."


class DuplicateSkillNameError(ValueError):
    """A non-archived skill with the same name exists for the outcome"""


def _normalize_target_label(value: Optional[str]) -> Optional[str]:
    trimmed = value.strip() if value else ""
    return trimmed or None


def _normalize_target_value(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    number = float(value)
    return None if math.isnan(number) else number


def _validate_confidence(value: int, label: str = "Confidence") -> int:
    if value is None or int(value) != value or not 1 <= value <= 5:
        raise ValueError(f"{label} must be between 1 and 5.")
    return int(value)


def _timestamp(now: Optional[datetime]) -> str:
    if now is None:
        now = datetime.now(timezone.utc)
    return to_instant(now).astimezone(timezone.utc).isoformat()


class SkillService(BaseService):
    """Skill items and skill logs backed by the row store."""

    def __init__(self, db, config=None):
        super().__init__(db, config, "skills")

    # ------------------------------------------------------------------
    # Skill items
    # ------------------------------------------------------------------

    def _ensure_unique_live_name(
        self,
        outcome_id: str,
        name: str,
        exclude_id: Optional[str] = None,
    ) -> None:
        rows = self.db.select('skill_items', [eq('outcome_id', outcome_id)])
        for row in rows:
            if row['id'] == exclude_id or row.get('stage') == 'archived':
                continue
            if row.get('name', '').strip().lower() == name.lower():
                raise DuplicateSkillNameError(DUPLICATE_NAME_MESSAGE)

    def _translate_constraint_error(self, error: ConstraintViolationError) -> Exception:
        if error.constraint and LIVE_NAME_INDEX in error.constraint:
            return DuplicateSkillNameError(DUPLICATE_NAME_MESSAGE)
        if LIVE_NAME_INDEX in str(error):
            return DuplicateSkillNameError(DUPLICATE_NAME_MESSAGE)
        return error

    def create_skill_item(
        self,
        outcome_id: str,
        name: str,
        initial_confidence: int,
        target_label: Optional[str] = None,
        target_value: Optional[float] = None,
    ) -> SkillItem:
        """
        Create an active skill under an outcome.

        Raises:
            ValueError: blank name or confidence outside 1-5
            DuplicateSkillNameError: a live skill already uses the name
        """
        name = name.strip()
        if not name:
            raise ValueError("Skill name is required.")
        initial_confidence = _validate_confidence(initial_confidence, "Initial confidence")
        self._ensure_unique_live_name(outcome_id, name)

        try:
            row = self.db.insert('skill_items', {
                'outcome_id': outcome_id,
                'name': name,
                'stage': 'active',
                'initial_confidence': initial_confidence,
                'target_label': _normalize_target_label(target_label),
                'target_value': _normalize_target_value(target_value),
                'graduation_suppressed_at': None,
            })
        except ConstraintViolationError as e:
            raise self._translate_constraint_error(e) from e

        self.log_action("create_skill_item", {"skill_id": row['id'], "outcome_id": outcome_id})
        return SkillItem.from_dict(row)

    def update_skill_item(
        self,
        skill_id: str,
        name: str,
        initial_confidence: int,
        target_label: Optional[str] = None,
        target_value: Optional[float] = None,
    ) -> SkillItem:
        skill = self.fetch_skill_by_id(skill_id)
        name = name.strip()
        if not name:
            raise ValueError("Skill name is required.")
        initial_confidence = _validate_confidence(initial_confidence, "Initial confidence")
        if skill.stage != 'archived':
            self._ensure_unique_live_name(skill.outcome_id, name, exclude_id=skill_id)

        try:
            rows = self.db.update('skill_items', {
                'name': name,
                'initial_confidence': initial_confidence,
                'target_label': _normalize_target_label(target_label),
                'target_value': _normalize_target_value(target_value),
            }, [eq('id', skill_id)])
        except ConstraintViolationError as e:
            raise self._translate_constraint_error(e) from e

        self.log_action("update_skill_item", {"skill_id": skill_id})
        return SkillItem.from_dict(rows[0])

    def set_skill_stage(self, skill_id: str, stage: str) -> SkillItem:
        """Move a skill between stages; entering review clears any suppression."""
        if stage not in SKILL_STAGES:
            raise ValueError(f"Unknown skill stage: {stage}")

        changes = {'stage': stage}
        if stage == 'review':
            changes['graduation_suppressed_at'] = None

        if stage != 'archived':
            skill = self.fetch_skill_by_id(skill_id)
            if skill.stage == 'archived':
                self._ensure_unique_live_name(skill.outcome_id, skill.name, exclude_id=skill_id)

        try:
            rows = self.db.update('skill_items', changes, [eq('id', skill_id)])
        except ConstraintViolationError as e:
            raise self._translate_constraint_error(e) from e
        if not rows:
            raise RecordNotFoundError(f"Skill item not found: {skill_id}")

        self.log_action("set_skill_stage", {"skill_id": skill_id, "stage": stage})
        return SkillItem.from_dict(rows[0])

    def suppress_skill_graduation(self, skill_id: str, now: Optional[datetime] = None) -> None:
        """Record that the user declined moving this skill to review."""
        rows = self.db.update(
            'skill_items',
            {'graduation_suppressed_at': _timestamp(now)},
            [eq('id', skill_id)],
        )
        if not rows:
            raise RecordNotFoundError(f"Skill item not found: {skill_id}")
        self.log_action("suppress_skill_graduation", {"skill_id": skill_id})

    # ------------------------------------------------------------------
    # Skill logs
    # ------------------------------------------------------------------

    def replace_skill_logs_for_action(
        self,
        action_log_id: str,
        entries: Sequence,
        now: Optional[datetime] = None,
    ) -> List[str]:
        """
        Make the action's skill logs match entries.

        Existing logs for listed skills are updated, missing ones inserted
        (stamped now) and logs for skills no longer listed are deleted.

        Args:
            action_log_id: Action log the skill logs belong to
            entries: Objects with skill_item_id, confidence, target_result
            now: Timestamp for new logs (defaults to now)

        Returns:
            Skill ids that received a new log
        """
        for entry in entries:
            _validate_confidence(entry.confidence)

        existing_rows = self.db.select('skill_logs', [eq('action_log_id', action_log_id)])
        existing_by_skill = {row['skill_item_id']: row for row in existing_rows}
        logged_at = _timestamp(now)
        created_skill_ids = []

        for entry in entries:
            existing = existing_by_skill.get(entry.skill_item_id)
            if existing is not None:
                self.db.update('skill_logs', {
                    'confidence': int(entry.confidence),
                    'target_result': entry.target_result,
                }, [eq('id', existing['id'])])
                continue

            self.db.insert('skill_logs', {
                'skill_item_id': entry.skill_item_id,
                'action_log_id': action_log_id,
                'confidence': int(entry.confidence),
                'target_result': entry.target_result,
                'logged_at': logged_at,
            })
            created_skill_ids.append(entry.skill_item_id)

        keep = {entry.skill_item_id for entry in entries}
        stale_ids = [row['id'] for row in existing_rows if row['skill_item_id'] not in keep]
        if stale_ids:
            self.db.delete('skill_logs', [in_('id', stale_ids)])

        self.log_action("replace_skill_logs_for_action", {
            "action_log_id": action_log_id,
            "created": created_skill_ids,
            "deleted": len(stale_ids),
        })
        return created_skill_ids

    def delete_skill_logs_by_action_log_id(self, action_log_id: str) -> int:
        removed = self.db.delete('skill_logs', [eq('action_log_id', action_log_id)])
        if removed:
            self.log_action("delete_skill_logs", {"action_log_id": action_log_id, "count": removed})
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _logs_for_skills(self, skill_ids: Sequence[str]) -> List[SkillLog]:
        if not skill_ids:
            return []
        rows = self.db.select(
            'skill_logs',
            [in_('skill_item_id', skill_ids)],
            order_by='logged_at',
            descending=True,
        )
        return [SkillLog.from_dict(row) for row in rows]

    def fetch_skills_for_outcome(self, outcome_id: str) -> Tuple[List[SkillItem], List[SkillLog]]:
        """Every skill of the outcome (any stage) with all of their logs."""
        rows = self.db.select('skill_items', [eq('outcome_id', outcome_id)], order_by='created_at')
        skills = [SkillItem.from_dict(row) for row in rows]
        return skills, self._logs_for_skills([skill.id for skill in skills])

    def fetch_skills_for_outcomes(
        self,
        outcome_ids: Sequence[str],
    ) -> Tuple[List[SkillItem], List[SkillLog]]:
        """Active and review skills of the outcomes with all of their logs."""
        if not outcome_ids:
            return [], []

        rows = self.db.select('skill_items', [
            in_('outcome_id', outcome_ids),
            in_('stage', ['active', 'review']),
        ], order_by='created_at')
        skills = [SkillItem.from_dict(row) for row in rows]
        return skills, self._logs_for_skills([skill.id for skill in skills])

    def fetch_skill_by_id(self, skill_id: str) -> SkillItem:
        row = self.db.select_one('skill_items', [eq('id', skill_id)])
        if row is None:
            raise RecordNotFoundError(f"Skill item not found: {skill_id}")
        return SkillItem.from_dict(row)

    def fetch_skill_logs_for_skill(self, skill_id: str, limit: Optional[int] = None) -> List[SkillLog]:
        rows = self.db.select(
            'skill_logs',
            [eq('skill_item_id', skill_id)],
            order_by='logged_at',
            descending=True,
            limit=limit,
        )
        return [SkillLog.from_dict(row) for row in rows]

    def fetch_skill_logs_by_action_ids(self, action_log_ids: Sequence[str]) -> List[SkillLog]:
        if not action_log_ids:
            return []
        rows = self.db.select('skill_logs', [in_('action_log_id', action_log_ids)])
        return [SkillLog.from_dict(row) for row in rows]

    def fetch_skill_action_context(self, action_log_ids: Sequence[str]) -> Dict[str, Dict]:
        """
        Describe where each action log came from.

        Returns:
            {action_log_id: {"action_date", "output_id", "output_description"}}
        """
        if not action_log_ids:
            return {}

        action_logs = self.db.select('action_logs', [in_('id', action_log_ids)])
        output_ids = sorted({row['output_id'] for row in action_logs})
        descriptions = {}
        if output_ids:
            for output in self.db.select('outputs', [in_('id', output_ids)]):
                descriptions[output['id']] = output.get('description')

        return {
            row['id']: {
                "action_date": row['action_date'],
                "output_id": row['output_id'],
                "output_description": descriptions.get(row['output_id']),
            }
            for row in action_logs
        }

    def check_graduation_eligibility(self, skill_id: str, now: Optional[datetime] = None) -> bool:
        skill = self.fetch_skill_by_id(skill_id)
        if skill.stage != 'active':
            return False

        # logged_at text may mix offsets; ordering by instant happens in the check
        logs = self.fetch_skill_logs_for_skill(skill_id)
        return is_skill_eligible_for_graduation(skill, logs, now)

    def compute_weekly_skill_summary_by_outcome(
        self,
        outcome_ids: Sequence[str],
        week_start: str,
        week_end: str,
    ) -> Dict[str, SkillSummary]:
        if not outcome_ids:
            return {}

        rows = self.db.select('skill_items', [in_('outcome_id', outcome_ids)])
        skills = [SkillItem.from_dict(row) for row in rows]
        logs = self._logs_for_skills([skill.id for skill in skills])

        return compute_weekly_skill_summary_from_data(
            outcome_ids=outcome_ids,
            week_start=week_start,
            week_end=week_end,
            skills=skills,
            logs=logs,
        )

    def priority_queue_for_outcomes(
        self,
        outcome_ids: Sequence[str],
        now: Optional[datetime] = None,
    ) -> List[SkillPriority]:
        skills, logs = self.fetch_skills_for_outcomes(outcome_ids)
        return compute_priority_queue(skills, logs, now)
