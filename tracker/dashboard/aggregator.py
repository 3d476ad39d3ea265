"""
Data aggregation module for the Outcome Tracker Dashboard.

Collects outcomes, outputs, action logs and skills for one day into a
single DailyDashboard structure for display.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from tracker.core.config import Config
from tracker.core.database import RowStore
from tracker.core.dates import add_local_days, format_local_date, round_half_up, week_start_for
from tracker.core.models import ActionLog, Outcome, Output
from tracker.dashboard.schedule import WeeklyProgress, compute_weekly_progress, scheduled_on_date
from tracker.services.action_logs import ActionLogService
from tracker.services.outcomes import OutcomeService
from tracker.skills.priority import SkillPriority, suggestions_by_outcome, top_suggestions
from tracker.skills.service import SkillService
from tracker.skills.weekly_summary import SkillSummary

logger = logging.getLogger("tracker.dashboard")


@dataclass
class DashboardOutput:
    """An output as shown on one day of the dashboard."""
    output: Output
    scheduled_today: bool
    today_log: Optional[ActionLog]
    weekly_progress: WeeklyProgress

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.output.id,
            "description": self.output.description,
            "frequency_type": self.output.frequency_type,
            "frequency_value": self.output.frequency_value,
            "schedule_weekdays": self.output.schedule_weekdays or None,
            "is_starter": self.output.is_starter,
            "scheduled_today": self.scheduled_today,
            "today_log": {
                "completed": self.today_log.completed,
                "total": self.today_log.total,
                "notes": self.today_log.notes,
            } if self.today_log else None,
            "weekly_progress": self.weekly_progress.to_dict(),
        }


@dataclass
class DashboardOutcome:
    """An outcome with its active outputs."""
    outcome: Outcome
    outputs: List[DashboardOutput] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.outcome.id,
            "title": self.outcome.title,
            "category": self.outcome.category,
            "outputs": [output.to_dict() for output in self.outputs],
        }


@dataclass
class DailyStats:
    """Statistics for the dashboard day."""
    scheduled_count: int = 0
    completed_count: int = 0
    completion_rate: int = 0
    missed_yesterday_count: int = 0


@dataclass
class DailyDashboard:
    """Complete dashboard data structure."""
    generated_at: datetime
    date: str
    week_start: str
    week_end: str
    start_of_week: int
    outcomes: List[DashboardOutcome]
    stats: DailyStats
    priority_queue: List[SkillPriority]
    suggestions_by_outcome: Dict[str, List[SkillPriority]]
    top_suggestions: List[SkillPriority]
    skill_summary: Dict[str, SkillSummary]

    def scheduled_outputs(self) -> List[DashboardOutput]:
        return [
            output
            for outcome in self.outcomes
            for output in outcome.outputs
            if output.scheduled_today
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "date": self.date,
            "week_start": self.week_start,
            "week_end": self.week_end,
            "start_of_week": self.start_of_week,
            "missed_yesterday_count": self.stats.missed_yesterday_count,
            "stats": {
                "scheduled_count": self.stats.scheduled_count,
                "completed_count": self.stats.completed_count,
                "completion_rate": self.stats.completion_rate,
            },
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "top_suggestions": [entry.to_dict() for entry in self.top_suggestions],
            "suggestions_by_outcome": {
                outcome_id: [entry.to_dict() for entry in entries]
                for outcome_id, entries in self.suggestions_by_outcome.items()
            },
            "skill_summary": {
                outcome_id: summary.to_dict()
                for outcome_id, summary in self.skill_summary.items()
            },
        }


def is_log_complete(log: Optional[ActionLog]) -> bool:
    """A log counts as done when it has a total and meets it."""
    return log is not None and log.total > 0 and log.completed >= log.total


class DashboardAggregator:
    """
    Central data aggregation for the daily dashboard.

    Queries outcomes, outputs, action logs and skills through the services
    and combines them into a DailyDashboard.
    """

    def __init__(self, db: RowStore, config: Optional[Config] = None):
        """
        Initialize aggregator.

        Args:
            db: Row store
            config: Configuration (creates default if not provided)
        """
        self.db = db
        self.config = config if config else Config()
        self.outcomes = OutcomeService(db, self.config)
        self.skills = SkillService(db, self.config)
        self.action_logs = ActionLogService(db, self.config, skill_service=self.skills)

    def _preference(self, key: str, default: int) -> int:
        return int(self.config.get(key, "preferences", default))

    def count_missed(self, outputs: List[Output], logs_by_key: Dict, day: str) -> int:
        """Outputs scheduled on day whose log is missing or has nothing completed."""
        missed = 0
        for output in outputs:
            if not scheduled_on_date(output, day):
                continue
            log = logs_by_key.get((output.id, day))
            if log is None or log.completed == 0:
                missed += 1
        return missed

    def aggregate(
        self,
        target_date: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DailyDashboard:
        """
        Aggregate all data for the dashboard.

        Args:
            target_date: YYYY-MM-DD to show (defaults to today)
            now: Current datetime for skill scoring (defaults to now)

        Returns:
            Complete DailyDashboard structure
        """
        if now is None:
            now = datetime.now()
        if target_date is None:
            target_date = format_local_date(now)

        start_of_week = self.config.get_start_of_week()
        week_start = week_start_for(target_date, start_of_week)
        week_end = add_local_days(week_start, 6)
        yesterday = add_local_days(target_date, -1)

        outcomes = self.outcomes.list_outcomes()
        outcome_ids = [outcome.id for outcome in outcomes]
        outputs = self.outcomes.list_outputs(outcome_ids, status='active')

        logs = self.action_logs.fetch_action_logs_for_range(
            [output.id for output in outputs],
            min(week_start, yesterday),
            max(week_end, target_date),
        )
        logs_by_key = {(log.output_id, log.action_date): log for log in logs}
        logs_by_output: Dict[str, List[ActionLog]] = {}
        for log in logs:
            logs_by_output.setdefault(log.output_id, []).append(log)

        outputs_by_outcome: Dict[str, List[Output]] = {}
        for output in outputs:
            outputs_by_outcome.setdefault(output.outcome_id, []).append(output)

        dashboard_outcomes = []
        for outcome in outcomes:
            entries = [
                DashboardOutput(
                    output=output,
                    scheduled_today=scheduled_on_date(output, target_date),
                    today_log=logs_by_key.get((output.id, target_date)),
                    weekly_progress=compute_weekly_progress(
                        output, week_start, week_end, logs_by_output.get(output.id, [])
                    ),
                )
                for output in outputs_by_outcome.get(outcome.id, [])
            ]
            dashboard_outcomes.append(DashboardOutcome(outcome=outcome, outputs=entries))

        scheduled = [
            entry for outcome in dashboard_outcomes for entry in outcome.outputs
            if entry.scheduled_today
        ]
        completed_count = sum(1 for entry in scheduled if is_log_complete(entry.today_log))
        stats = DailyStats(
            scheduled_count=len(scheduled),
            completed_count=completed_count,
            completion_rate=(
                round_half_up(completed_count / len(scheduled) * 100) if scheduled else 0
            ),
            missed_yesterday_count=self.count_missed(outputs, logs_by_key, yesterday),
        )

        queue = self.skills.priority_queue_for_outcomes(outcome_ids, now)
        skill_summary = self.skills.compute_weekly_skill_summary_by_outcome(
            outcome_ids, week_start, week_end
        )

        logger.debug(
            "Aggregated dashboard for %s: %d outcomes, %d scheduled outputs, %d ranked skills",
            target_date, len(outcomes), len(scheduled), len(queue),
        )

        return DailyDashboard(
            generated_at=now,
            date=target_date,
            week_start=week_start,
            week_end=week_end,
            start_of_week=start_of_week,
            outcomes=dashboard_outcomes,
            stats=stats,
            priority_queue=queue,
            suggestions_by_outcome=suggestions_by_outcome(
                queue, self._preference("suggestions_per_outcome", 3)
            ),
            top_suggestions=top_suggestions(queue, self._preference("top_suggestions", 3)),
            skill_summary=skill_summary,
        )
