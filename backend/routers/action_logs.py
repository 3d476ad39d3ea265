"""
Action log API endpoints.

Saving a log upserts the day's record for the output and, when skill logs
are included, replaces the skill logs attached to it. The response lists
newly logged skills that now qualify for review so the client can prompt.
"""

from fastapi import APIRouter, Depends

from backend.dependencies import get_action_log_service, get_outcome_service
from backend.errors import to_http_exception
from backend.schemas import ActionLogCreate, ActionLogSaveResponse
from tracker.services.action_logs import ActionLogService
from tracker.services.outcomes import OutcomeService

router = APIRouter(prefix="/action-logs", tags=["action-logs"])


@router.post("", response_model=ActionLogSaveResponse)
async def save_action_log(
    body: ActionLogCreate,
    action_logs: ActionLogService = Depends(get_action_log_service),
    outcomes: OutcomeService = Depends(get_outcome_service),
):
    try:
        outcomes.get_output(body.output_id)
        for entry in body.skill_logs or []:
            if not 1 <= entry.confidence <= 5:
                raise ValueError("Confidence must be between 1 and 5.")

        result = action_logs.save_action_log(
            body.output_id,
            body.action_date,
            body.completed,
            body.total,
            body.notes,
        )

        created = []
        candidates = []
        if body.skill_logs is not None and result.completed > 0:
            skills = action_logs.skill_service
            created = skills.replace_skill_logs_for_action(result.action_log_id, body.skill_logs)
            candidates = [
                skill_id for skill_id in created
                if skills.check_graduation_eligibility(skill_id)
            ]

        return ActionLogSaveResponse(
            action_log_id=result.action_log_id,
            completed=result.completed,
            created=result.created,
            skill_logs_created=created,
            graduation_candidates=candidates,
        )
    except Exception as e:
        raise to_http_exception(e)
