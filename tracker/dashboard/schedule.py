"""
Output scheduling and weekly progress.

Decides which outputs belong on a given day and how much of an output's
weekly commitment its action logs cover.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Sequence

from tracker.core.dates import js_weekday, local_date_range, round_half_up
from tracker.core.models import ActionLog, Output

DAYS_PER_WEEK = 7


@dataclass
class WeeklyProgress:
    """Progress toward an output's weekly target."""
    completed: float
    target: float
    rate: int
    target_met: bool

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def scheduled_on_date(output: Output, date_value: str) -> bool:
    """
    Whether output should be worked on date_value (YYYY-MM-DD).

    Daily outputs are always scheduled, fixed-weekly outputs only on their
    configured weekdays (0=Sun..6=Sat). Flexible and unknown frequency
    types are always available for logging.
    """
    if output.frequency_type == 'daily':
        return True

    if output.frequency_type == 'fixed_weekly':
        return js_weekday(date_value) in (output.schedule_weekdays or [])

    return True


def compute_weekly_progress(
    output: Output,
    week_start: str,
    week_end: str,
    action_logs: Sequence[ActionLog],
) -> WeeklyProgress:
    """
    Weekly progress for one output.

    Flexible outputs sum completions in [week_start, week_end], capped at
    frequency_value. Daily and fixed-weekly outputs earn up to one unit per
    scheduled day: completed / total of that day's log, capped at 1.

    Args:
        output: Output to measure
        week_start: YYYY-MM-DD, first day of the week
        week_end: YYYY-MM-DD, last day of the week (inclusive)
        action_logs: Action logs for this output, any dates

    Returns:
        WeeklyProgress; rate is a whole percentage
    """
    logs = [
        log for log in action_logs
        if log.output_id == output.id and week_start <= log.action_date <= week_end
    ]

    if output.frequency_type == 'flexible_weekly':
        target = output.frequency_value
        completed = min(sum(log.completed for log in logs), target)
        return WeeklyProgress(
            completed=completed,
            target=target,
            rate=round_half_up(completed / target * 100) if target > 0 else 0,
            target_met=completed >= target,
        )

    logs_by_day = {log.action_date: log for log in logs}
    completed_units = 0.0
    target_units = 0

    for day in local_date_range(week_start, DAYS_PER_WEEK):
        if not scheduled_on_date(output, day):
            continue

        target_units += 1
        log = logs_by_day.get(day)
        if log is None or log.completed <= 0 or log.total <= 0:
            continue

        completed_units += min(log.completed / log.total, 1)

    return WeeklyProgress(
        completed=round_half_up(completed_units, 1),
        target=target_units,
        rate=round_half_up(completed_units / target_units * 100) if target_units > 0 else 0,
        target_met=completed_units >= target_units,
    )
