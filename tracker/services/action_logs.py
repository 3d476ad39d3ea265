"""
Action log persistence.

One action log per (output, date): saving again for the same day updates
the existing log in place.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from tracker.core.database import eq, gte, in_, lte
from tracker.core.models import ActionLog
from tracker.services.base_service import BaseService
from tracker.skills.service import SkillService


@dataclass
class SaveActionLogResult:
    action_log_id: str
    completed: float
    created: bool


def _clamp_count(value) -> float:
    """Non-negative number; anything unparseable counts as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    number = max(0.0, number)
    return int(number) if number.is_integer() else number


class ActionLogService(BaseService):
    """Read and upsert daily action logs."""

    def __init__(self, db, config=None, skill_service: Optional[SkillService] = None):
        super().__init__(db, config, "action_logs")
        self.skill_service = skill_service or SkillService(db, config)

    def fetch_action_logs_for_date(
        self,
        output_ids: Sequence[str],
        action_date: str,
    ) -> List[ActionLog]:
        if not output_ids:
            return []

        rows = self.db.select('action_logs', [
            in_('output_id', output_ids),
            eq('action_date', action_date),
        ])
        return [ActionLog.from_dict(row) for row in rows]

    def fetch_action_logs_for_range(
        self,
        output_ids: Sequence[str],
        start_date: str,
        end_date: str,
    ) -> List[ActionLog]:
        """Logs with start_date <= action_date <= end_date."""
        if not output_ids:
            return []

        rows = self.db.select('action_logs', [
            in_('output_id', output_ids),
            gte('action_date', start_date),
            lte('action_date', end_date),
        ], order_by='action_date')
        return [ActionLog.from_dict(row) for row in rows]

    def save_action_log(
        self,
        output_id: str,
        action_date: str,
        completed,
        total,
        notes: Optional[str] = "",
    ) -> SaveActionLogResult:
        """
        Insert or update the log for output_id on action_date.

        Counts are clamped to >= 0 and blank notes are stored as None.
        Updating an existing log to completed == 0 removes the skill logs
        attached to it.
        """
        completed = _clamp_count(completed)
        total = _clamp_count(total)
        cleaned_notes = notes.strip() if notes and notes.strip() else None

        existing = self.db.select_one('action_logs', [
            eq('output_id', output_id),
            eq('action_date', action_date),
        ])

        if existing is not None:
            self.db.update(
                'action_logs',
                {'completed': completed, 'total': total, 'notes': cleaned_notes},
                [eq('id', existing['id'])],
            )
            if completed == 0:
                self.skill_service.delete_skill_logs_by_action_log_id(existing['id'])

            self.log_action("update_action_log", {
                "action_log_id": existing['id'],
                "completed": completed,
                "total": total,
            })
            return SaveActionLogResult(existing['id'], completed, created=False)

        inserted = self.db.insert('action_logs', {
            'output_id': output_id,
            'action_date': action_date,
            'completed': completed,
            'total': total,
            'notes': cleaned_notes,
        })
        self.log_action("create_action_log", {
            "action_log_id": inserted['id'],
            "output_id": output_id,
            "action_date": action_date,
        })
        return SaveActionLogResult(inserted['id'], completed, created=True)
