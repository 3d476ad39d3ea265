"""
Weekly skill summary per outcome.

For each outcome: how many of its skills were logged during the week, and
the average confidence change those skills achieved compared with where
they stood before the week began.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence

from tracker.core.dates import add_local_days, parse_local_date, round_half_up, to_instant
from tracker.core.models import SkillItem, SkillLog
from tracker.skills.priority import group_skill_logs_by_skill


@dataclass
class SkillSummary:
    """Skill activity for one outcome over one week."""
    skills_worked_count: int = 0
    average_confidence_delta: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


def compute_weekly_skill_summary_from_data(
    outcome_ids: Sequence[str],
    week_start: str,
    week_end: str,
    skills: Sequence[SkillItem],
    logs: Sequence[SkillLog],
) -> Dict[str, SkillSummary]:
    """
    Summarize skill progress for each requested outcome.

    Args:
        outcome_ids: Outcomes to report on (each gets an entry)
        week_start: YYYY-MM-DD, first day of the week
        week_end: YYYY-MM-DD, last day of the week (inclusive)
        skills: Skills belonging to those outcomes
        logs: Skill logs in any order

    Returns:
        Mapping of outcome id to SkillSummary. Outcomes without logs this
        week report (0, None).
    """
    result = {outcome_id: SkillSummary() for outcome_id in outcome_ids}
    if not result or not skills:
        return result

    skill_ids = {skill.id for skill in skills}
    week_start_at = to_instant(parse_local_date(week_start))
    end_exclusive_at = to_instant(parse_local_date(add_local_days(week_end, 1)))

    relevant_logs = [
        log for log in logs
        if log.skill_item_id in skill_ids and to_instant(log.logged_at) < end_exclusive_at
    ]
    logs_by_skill = group_skill_logs_by_skill(relevant_logs)

    skills_by_outcome: Dict[str, List[SkillItem]] = {}
    for skill in skills:
        skills_by_outcome.setdefault(skill.outcome_id, []).append(skill)

    for outcome_id, outcome_skills in skills_by_outcome.items():
        if outcome_id not in result:
            continue

        deltas = []
        for skill in outcome_skills:
            skill_logs = logs_by_skill.get(skill.id, [])
            this_week = [log for log in skill_logs if to_instant(log.logged_at) >= week_start_at]
            if not this_week:
                continue

            last_this_week = this_week[0]
            previous = next(
                (log for log in skill_logs if to_instant(log.logged_at) < week_start_at),
                None,
            )
            baseline = previous.confidence if previous else skill.initial_confidence
            deltas.append(last_this_week.confidence - baseline)

        if deltas:
            result[outcome_id] = SkillSummary(
                skills_worked_count=len(deltas),
                average_confidence_delta=round_half_up(sum(deltas) / len(deltas), 1),
            )

    return result
