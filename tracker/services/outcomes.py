"""
Outcome and output management.
"""

from typing import List, Optional, Sequence

from tracker.core.database import RecordNotFoundError, eq, in_
from tracker.core.models import FREQUENCY_TYPES, OUTPUT_STATUSES, Outcome, Output
from tracker.services.base_service import BaseService


class OutcomeService(BaseService):
    """Create and list outcomes and their recurring outputs."""

    def __init__(self, db, config=None):
        super().__init__(db, config, "outcomes")

    def create_outcome(self, title: str, category: Optional[str] = None) -> Outcome:
        title = title.strip()
        if not title:
            raise ValueError("Outcome title is required.")

        row = self.db.insert('outcomes', {
            'title': title,
            'category': category.strip() if category and category.strip() else None,
        })
        self.log_action("create_outcome", {"outcome_id": row['id']})
        return Outcome.from_dict(row)

    def list_outcomes(self) -> List[Outcome]:
        rows = self.db.select('outcomes', order_by='created_at')
        return [Outcome.from_dict(row) for row in rows]

    def get_outcome(self, outcome_id: str) -> Outcome:
        row = self.db.select_one('outcomes', [eq('id', outcome_id)])
        if row is None:
            raise RecordNotFoundError(f"Outcome not found: {outcome_id}")
        return Outcome.from_dict(row)

    def create_output(
        self,
        outcome_id: str,
        description: str,
        frequency_type: str = 'daily',
        frequency_value: int = 1,
        schedule_weekdays: Optional[Sequence[int]] = None,
        is_starter: bool = False,
    ) -> Output:
        """
        Create a recurring output under an outcome.

        Raises:
            ValueError: unknown frequency type, weekdays outside 0-6, a
                fixed-weekly output without days, or a flexible target
                below 1
            RecordNotFoundError: the outcome does not exist
        """
        description = description.strip()
        if not description:
            raise ValueError("Output description is required.")
        if frequency_type not in FREQUENCY_TYPES:
            raise ValueError(f"Unknown frequency type: {frequency_type}")

        weekdays = sorted(set(int(day) for day in schedule_weekdays or []))
        if any(day < 0 or day > 6 for day in weekdays):
            raise ValueError("Schedule weekdays must be between 0 (Sun) and 6 (Sat).")
        if frequency_type == 'fixed_weekly' and not weekdays:
            raise ValueError("Fixed weekly outputs need at least one weekday.")
        if frequency_type == 'flexible_weekly' and frequency_value < 1:
            raise ValueError("Flexible weekly outputs need a target of at least 1.")

        self.get_outcome(outcome_id)
        sort_order = len(self.db.select('outputs', [eq('outcome_id', outcome_id)])) + 1

        row = self.db.insert('outputs', {
            'outcome_id': outcome_id,
            'description': description,
            'frequency_type': frequency_type,
            'frequency_value': int(frequency_value),
            'schedule_weekdays': weekdays if frequency_type == 'fixed_weekly' else None,
            'is_starter': bool(is_starter),
            'status': 'active',
            'sort_order': sort_order,
        })
        self.log_action("create_output", {"output_id": row['id'], "outcome_id": outcome_id})
        return Output.from_dict(row)

    def list_outputs(
        self,
        outcome_ids: Sequence[str],
        status: Optional[str] = 'active',
    ) -> List[Output]:
        if not outcome_ids:
            return []

        filters = [in_('outcome_id', outcome_ids)]
        if status is not None:
            filters.append(eq('status', status))
        rows = self.db.select('outputs', filters, order_by='sort_order')
        return [Output.from_dict(row) for row in rows]

    def get_output(self, output_id: str) -> Output:
        row = self.db.select_one('outputs', [eq('id', output_id)])
        if row is None:
            raise RecordNotFoundError(f"Output not found: {output_id}")
        return Output.from_dict(row)

    def set_output_status(self, output_id: str, status: str) -> Output:
        if status not in OUTPUT_STATUSES:
            raise ValueError(f"Unknown output status: {status}")

        rows = self.db.update('outputs', {'status': status}, [eq('id', output_id)])
        if not rows:
            raise RecordNotFoundError(f"Output not found: {output_id}")
        self.log_action("set_output_status", {"output_id": output_id, "status": status})
        return Output.from_dict(rows[0])
