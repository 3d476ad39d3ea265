"""
Skill practice priority and graduation rules.

Scores skills by how urgently they need practice, blending three pressures
(each 0-100):

    priority = (confidence * 0.45) + (recency * 0.40) + (target * 0.15)

Review-stage skills are in maintenance and keep 35% of that score. A skill
graduates from active practice after three straight confidence logs of 4+
inside the last 30 days.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from tracker.core.dates import days_between_local_dates, round_half_up, to_instant
from tracker.core.models import SkillItem, SkillLog

CONFIDENCE_WEIGHT = 0.45
RECENCY_WEIGHT = 0.40
TARGET_WEIGHT = 0.15

REVIEW_STAGE_FACTOR = 0.35
DEFAULT_TARGET_PRESSURE = 50.0

GRADUATION_LOG_COUNT = 3
GRADUATION_MIN_CONFIDENCE = 4
GRADUATION_WINDOW_DAYS = 30

RANKED_STAGES = ('active', 'review')


@dataclass
class SkillPriority:
    """Skill with computed practice priority and its breakdown."""
    skill: SkillItem
    latest_confidence: int
    confidence_pressure: float
    recency_pressure: float
    target_pressure: float
    priority_score: float
    final_score: float
    days_since_last: int
    target_interval: float
    breakdown: Dict[str, Any] = field(default_factory=dict)

    def __lt__(self, other: 'SkillPriority') -> bool:
        """Enable sorting by final score (descending)."""
        return self.final_score > other.final_score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill": self.skill.to_dict(),
            "latest_confidence": self.latest_confidence,
            "confidence_pressure": self.confidence_pressure,
            "recency_pressure": self.recency_pressure,
            "target_pressure": self.target_pressure,
            "priority_score": self.priority_score,
            "final_score": self.final_score,
            "days_since_last": self.days_since_last,
            "target_interval": self.target_interval,
        }


def sort_logs_newest_first(logs: Sequence[SkillLog]) -> List[SkillLog]:
    """Order logs by logged_at descending; equal timestamps keep input order."""
    return sorted(logs, key=lambda log: to_instant(log.logged_at), reverse=True)


def group_skill_logs_by_skill(logs: Sequence[SkillLog]) -> Dict[str, List[SkillLog]]:
    """Group logs by skill id, each group newest first."""
    grouped: Dict[str, List[SkillLog]] = {}
    for log in logs:
        grouped.setdefault(log.skill_item_id, []).append(log)
    return {skill_id: sort_logs_newest_first(items) for skill_id, items in grouped.items()}


def compute_confidence_pressure(confidence: float) -> float:
    """
    Pressure from low confidence.

    Confidence 1 -> 100 (most urgent), confidence 5 -> 0.
    """
    return (1 - (confidence - 1) / 4) * 100


def compute_target_interval(confidence: float) -> float:
    """Spaced-repetition interval in days: 1, 2, 4, 8, 16 for confidence 1..5."""
    interval = 2 ** (confidence - 1)
    return int(interval) if float(interval).is_integer() else interval


def compute_recency_pressure(days_since_last: int, target_interval: float) -> float:
    """Share of the target interval already elapsed, capped at 100."""
    return min((days_since_last / target_interval) * 100, 100)


def latest_target_result(logs_newest_first: Sequence[SkillLog]) -> Optional[float]:
    """Most recent non-null target result."""
    for log in logs_newest_first:
        if log.target_result is not None:
            return float(log.target_result)
    return None


def compute_target_pressure(skill: SkillItem, logs_newest_first: Sequence[SkillLog]) -> float:
    """
    Pressure from distance to the skill's numeric target.

    Scoring:
        - No target configured: 50 (neutral)
        - Target but no recorded result yet: 100
        - Otherwise: (1 - clamp(result / target, 0, 1)) * 100
    """
    if skill.target_value is None:
        return DEFAULT_TARGET_PRESSURE

    latest_value = latest_target_result(logs_newest_first)
    if latest_value is None:
        return 100.0

    ratio = min(max(latest_value / float(skill.target_value), 0), 1)
    return (1 - ratio) * 100


def compute_skill_priority(
    skill: SkillItem,
    logs: Sequence[SkillLog],
    now: Optional[datetime] = None,
) -> SkillPriority:
    """
    Score a single skill.

    Args:
        skill: Skill to score
        logs: The skill's logs, in any order
        now: Current instant (defaults to now)

    Returns:
        SkillPriority with pressures and scores rounded to 2 decimals
    """
    if now is None:
        now = datetime.now()

    ordered = sort_logs_newest_first(logs)
    latest_log = ordered[0] if ordered else None
    latest_confidence = latest_log.confidence if latest_log else skill.initial_confidence

    confidence_pressure = compute_confidence_pressure(latest_confidence)

    reference_date = latest_log.logged_at if latest_log else skill.created_at
    days_since_last = days_between_local_dates(reference_date, now)
    target_interval = compute_target_interval(latest_confidence)
    recency_pressure = compute_recency_pressure(days_since_last, target_interval)

    target_pressure = compute_target_pressure(skill, ordered)

    priority_score = (
        confidence_pressure * CONFIDENCE_WEIGHT +
        recency_pressure * RECENCY_WEIGHT +
        target_pressure * TARGET_WEIGHT
    )
    final_score = priority_score * REVIEW_STAGE_FACTOR if skill.stage == 'review' else priority_score

    breakdown = {
        "confidence": {
            "pressure": confidence_pressure,
            "weight": CONFIDENCE_WEIGHT,
            "latest_log_id": latest_log.id if latest_log else None,
        },
        "recency": {
            "pressure": recency_pressure,
            "weight": RECENCY_WEIGHT,
            "reference_date": reference_date.isoformat() if reference_date else None,
        },
        "target": {
            "pressure": target_pressure,
            "weight": TARGET_WEIGHT,
            "target_value": skill.target_value,
        },
        "stage": skill.stage,
    }

    return SkillPriority(
        skill=skill,
        latest_confidence=latest_confidence,
        confidence_pressure=round_half_up(confidence_pressure, 2),
        recency_pressure=round_half_up(recency_pressure, 2),
        target_pressure=round_half_up(target_pressure, 2),
        priority_score=round_half_up(priority_score, 2),
        final_score=round_half_up(final_score, 2),
        days_since_last=days_since_last,
        target_interval=target_interval,
        breakdown=breakdown,
    )


def compute_priority_queue(
    skills: Sequence[SkillItem],
    logs: Sequence[SkillLog],
    now: Optional[datetime] = None,
) -> List[SkillPriority]:
    """
    Rank active and review skills by final score, highest first.

    Archived skills are left out. Equal scores keep the input order.
    """
    if now is None:
        now = datetime.now()

    grouped = group_skill_logs_by_skill(logs)
    scored = [
        compute_skill_priority(skill, grouped.get(skill.id, []), now)
        for skill in skills
        if skill.stage in RANKED_STAGES
    ]
    scored.sort()
    return scored


def suggestions_by_outcome(
    queue: Sequence[SkillPriority],
    limit: int = 3,
) -> Dict[str, List[SkillPriority]]:
    """First `limit` queue entries for each outcome, in queue order."""
    suggestions: Dict[str, List[SkillPriority]] = {}
    for entry in queue:
        bucket = suggestions.setdefault(entry.skill.outcome_id, [])
        if len(bucket) < limit:
            bucket.append(entry)
    return suggestions


def top_suggestions(queue: Sequence[SkillPriority], limit: int = 3) -> List[SkillPriority]:
    """First `limit` queue entries across all outcomes."""
    return list(queue[:limit])


def is_skill_eligible_for_graduation(
    skill: SkillItem,
    logs: Sequence[SkillLog],
    now: Optional[datetime] = None,
) -> bool:
    """
    Whether an active skill is ready to move to review.

    Requires the three most recent logs to all have confidence >= 4 and to
    fall within 30 local days of now. A suppression (the user declined the
    move) blocks eligibility until a log newer than the suppression arrives.
    """
    if now is None:
        now = datetime.now()

    if skill.stage != 'active':
        return False

    latest = sort_logs_newest_first(logs)[:GRADUATION_LOG_COUNT]
    if len(latest) < GRADUATION_LOG_COUNT:
        return False

    newest_log = latest[0]
    if skill.graduation_suppressed_at is not None:
        if to_instant(newest_log.logged_at) <= to_instant(skill.graduation_suppressed_at):
            return False

    if any(log.confidence < GRADUATION_MIN_CONFIDENCE for log in latest):
        return False

    return all(
        days_between_local_dates(log.logged_at, now) <= GRADUATION_WINDOW_DAYS
        for log in latest
    )
