"""
Skill API endpoints.

Skill CRUD, stage changes, the practice priority queue, the weekly skill
summary and graduation checks, all through SkillService.
"""

from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from backend.dependencies import get_outcome_service, get_skill_service
from backend.errors import to_http_exception
from backend.schemas import (
    GraduationResponse,
    SkillCreate,
    SkillPriorityResponse,
    SkillResponse,
    SkillStageUpdate,
    SkillSummaryResponse,
    SkillUpdate,
)
from tracker.core.dates import add_local_days, format_local_date, week_start_for
from tracker.services.outcomes import OutcomeService
from tracker.skills.service import SkillService

router = APIRouter(prefix="/skills", tags=["skills"])


def _outcome_ids(outcome_id: Optional[str], outcomes: OutcomeService) -> List[str]:
    if outcome_id:
        return [outcome_id]
    return [outcome.id for outcome in outcomes.list_outcomes()]


@router.get("/queue", response_model=List[SkillPriorityResponse])
async def get_priority_queue(
    outcome_id: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    skills: SkillService = Depends(get_skill_service),
    outcomes: OutcomeService = Depends(get_outcome_service),
):
    """
    Active and review skills ranked by final score, highest first.

    Filter to one outcome with outcome_id.
    """
    try:
        queue = skills.priority_queue_for_outcomes(_outcome_ids(outcome_id, outcomes))
        if limit is not None:
            queue = queue[:limit]
        return [entry.to_dict() for entry in queue]
    except Exception as e:
        raise to_http_exception(e)


@router.get("/summary", response_model=Dict[str, SkillSummaryResponse])
async def get_weekly_summary(
    week_of: Optional[str] = Query(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    skills: SkillService = Depends(get_skill_service),
    outcomes: OutcomeService = Depends(get_outcome_service),
):
    """Skills worked and average confidence change per outcome for a week."""
    try:
        anchor = week_of or format_local_date(datetime.now())
        week_start = week_start_for(anchor, skills.config.get_start_of_week())
        result = skills.compute_weekly_skill_summary_by_outcome(
            _outcome_ids(None, outcomes), week_start, add_local_days(week_start, 6)
        )
        return {outcome_id: summary.to_dict() for outcome_id, summary in result.items()}
    except Exception as e:
        raise to_http_exception(e)


@router.get("/outcome/{outcome_id}", response_model=List[SkillResponse])
async def list_outcome_skills(
    outcome_id: str,
    skills: SkillService = Depends(get_skill_service),
):
    """Every skill of an outcome, any stage."""
    try:
        items, _ = skills.fetch_skills_for_outcome(outcome_id)
        return [item.to_dict() for item in items]
    except Exception as e:
        raise to_http_exception(e)


@router.post("", response_model=SkillResponse, status_code=201)
async def create_skill(
    body: SkillCreate,
    skills: SkillService = Depends(get_skill_service),
    outcomes: OutcomeService = Depends(get_outcome_service),
):
    try:
        outcomes.get_outcome(body.outcome_id)
        skill = skills.create_skill_item(
            body.outcome_id,
            body.name,
            body.initial_confidence,
            body.target_label,
            body.target_value,
        )
        return skill.to_dict()
    except Exception as e:
        raise to_http_exception(e)


@router.patch("/{skill_id}", response_model=SkillResponse)
async def update_skill(
    skill_id: str,
    body: SkillUpdate,
    skills: SkillService = Depends(get_skill_service),
):
    try:
        skill = skills.update_skill_item(
            skill_id,
            body.name,
            body.initial_confidence,
            body.target_label,
            body.target_value,
        )
        return skill.to_dict()
    except Exception as e:
        raise to_http_exception(e)


@router.post("/{skill_id}/stage", response_model=SkillResponse)
async def set_skill_stage(
    skill_id: str,
    body: SkillStageUpdate,
    skills: SkillService = Depends(get_skill_service),
):
    """Move a skill to active, review or archived."""
    try:
        return skills.set_skill_stage(skill_id, body.stage).to_dict()
    except Exception as e:
        raise to_http_exception(e)


@router.post("/{skill_id}/suppress-graduation", response_model=SkillResponse)
async def suppress_graduation(
    skill_id: str,
    skills: SkillService = Depends(get_skill_service),
):
    """Decline the review prompt until a newer qualifying log exists."""
    try:
        skills.suppress_skill_graduation(skill_id)
        return skills.fetch_skill_by_id(skill_id).to_dict()
    except Exception as e:
        raise to_http_exception(e)


@router.get("/{skill_id}/graduation", response_model=GraduationResponse)
async def check_graduation(
    skill_id: str,
    skills: SkillService = Depends(get_skill_service),
):
    try:
        return GraduationResponse(
            skill_id=skill_id,
            eligible=skills.check_graduation_eligibility(skill_id),
        )
    except Exception as e:
        raise to_http_exception(e)
