"""
Skills module for Outcome Tracker.

Practice priority scoring, graduation eligibility, weekly skill summaries,
and the row-store backed SkillService.
"""

from .priority import (
    SkillPriority,
    compute_skill_priority,
    compute_priority_queue,
    is_skill_eligible_for_graduation,
    group_skill_logs_by_skill,
    suggestions_by_outcome,
    top_suggestions,
)
from .weekly_summary import SkillSummary, compute_weekly_skill_summary_from_data
from .service import SkillService, DuplicateSkillNameError

__all__ = [
    # Priority
    'SkillPriority',
    'compute_skill_priority',
    'compute_priority_queue',
    'is_skill_eligible_for_graduation',
    'group_skill_logs_by_skill',
    'suggestions_by_outcome',
    'top_suggestions',
    # Weekly summary
    'SkillSummary',
    'compute_weekly_skill_summary_from_data',
    # Persistence
    'SkillService',
    'DuplicateSkillNameError',
]
