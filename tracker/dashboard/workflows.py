"""
Daily logging workflows.

Form defaults, validation and the graduation prompt used when the user
records an output's action log together with skill confidence logs. Shared
by the CLI and the HTTP API.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from tracker.core.dates import WEEKDAY_LABELS, round_half_up
from tracker.core.models import ActionLog, Output, SkillItem, SkillLog

logger = logging.getLogger("tracker.workflows")

DEFAULT_DRAFT_CONFIDENCE = 3


@dataclass
class LogDraft:
    """Editable values for an output's action log."""
    completed: float
    total: float
    notes: str


@dataclass
class SkillLogDraft:
    """Editable values for one skill's confidence log."""
    selected: bool = False
    confidence: int = DEFAULT_DRAFT_CONFIDENCE
    target_result: str = ""


@dataclass
class SkillLogEntry:
    """Validated skill log ready to be saved."""
    skill_item_id: str
    confidence: int
    target_result: Optional[float] = None


def create_log_draft(output: Output, today_log: Optional[ActionLog] = None) -> LogDraft:
    """Prefill from today's log, else 0 of (weekly target or 1)."""
    if today_log is not None:
        return LogDraft(
            completed=today_log.completed,
            total=today_log.total,
            notes=today_log.notes or "",
        )

    total = output.frequency_value if output.frequency_type == 'flexible_weekly' else 1
    return LogDraft(completed=0, total=total, notes="")


def frequency_description(output: Output) -> str:
    """Human-readable schedule, e.g. 'Fixed weekly (Mon, Wed)'."""
    if output.frequency_type == 'daily':
        return "Daily"

    if output.frequency_type == 'flexible_weekly':
        return f"{output.frequency_value}x/week (flexible)"

    days = ", ".join(WEEKDAY_LABELS[day] for day in output.schedule_weekdays or [])
    return f"Fixed weekly ({days or 'no days'})"


def score_label(score: Optional[float]) -> str:
    if score is None:
        return "n/a"
    return str(round_half_up(score))


def build_skill_drafts_from_existing_logs(
    outcome_skills: Sequence[SkillItem],
    existing_logs: Sequence[SkillLog],
) -> Dict[str, SkillLogDraft]:
    """Drafts for every skill, selected where a log for the action already exists."""
    existing_by_skill = {log.skill_item_id: log for log in existing_logs}
    drafts = {}

    for skill in outcome_skills:
        existing = existing_by_skill.get(skill.id)
        if existing is None:
            drafts[skill.id] = SkillLogDraft()
            continue

        target = existing.target_result
        if target is None:
            target_text = ""
        elif float(target).is_integer():
            target_text = str(int(target))
        else:
            target_text = str(target)

        drafts[skill.id] = SkillLogDraft(
            selected=True,
            confidence=existing.confidence,
            target_result=target_text,
        )

    return drafts


def _parse_target(value: str) -> Tuple[Optional[float], bool]:
    """Return (number, ok); blank input is (None, True)."""
    text = value.strip()
    if not text:
        return None, True
    try:
        number = float(text)
    except ValueError:
        return None, False
    return number, not math.isnan(number)


def build_selected_skill_entries(
    drafts: Dict[str, SkillLogDraft],
) -> Tuple[List[SkillLogEntry], Optional[str]]:
    """
    Turn selected drafts into entries.

    Returns:
        (entries, None) when valid, ([], error_message) otherwise
    """
    entries = []
    for skill_id, draft in drafts.items():
        if not draft.selected:
            continue

        target, ok = _parse_target(draft.target_result)
        if not ok:
            return [], "Target result must be numeric for selected skills."

        entries.append(SkillLogEntry(
            skill_item_id=skill_id,
            confidence=draft.confidence,
            target_result=target,
        ))

    if any(entry.confidence < 1 or entry.confidence > 5 for entry in entries):
        return [], "Confidence must be between 1 and 5."

    return entries, None


def run_graduation_prompt_flow(
    created_skill_ids: Sequence[str],
    skills: Sequence[SkillItem],
    is_skill_eligible: Callable[[str], bool],
    move_to_review: Callable[[str], object],
    suppress_graduation: Callable[[str], object],
    confirm_move_to_review: Callable[[str], bool],
) -> List[str]:
    """
    Offer review for each newly logged skill that qualifies.

    Accepting moves the skill to review, declining suppresses the prompt
    until a newer qualifying log exists.

    Returns:
        Ids of skills that were moved to review
    """
    names = {skill.id: skill.name for skill in skills}
    moved = []

    for skill_id in created_skill_ids:
        if not is_skill_eligible(skill_id):
            continue

        skill_name = names.get(skill_id) or "This skill"
        message = (
            f"{skill_name} qualifies for review (3 recent confidence logs of 4+). "
            "Move it to Review now?"
        )

        if confirm_move_to_review(message):
            move_to_review(skill_id)
            moved.append(skill_id)
        else:
            suppress_graduation(skill_id)
            logger.info("Graduation suppressed for skill %s", skill_id)

    return moved
