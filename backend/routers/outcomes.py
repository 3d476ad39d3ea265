"""
Outcome and output API endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends

from backend.dependencies import get_outcome_service
from backend.errors import to_http_exception
from backend.schemas import OutcomeCreate, OutcomeResponse, OutputCreate, OutputResponse
from tracker.core.models import Outcome, Output
from tracker.services.outcomes import OutcomeService

router = APIRouter(tags=["outcomes"])


def _outcome_response(outcome: Outcome) -> OutcomeResponse:
    return OutcomeResponse(
        id=outcome.id,
        title=outcome.title,
        category=outcome.category,
        created_at=outcome.created_at.isoformat() if outcome.created_at else None,
    )


def _output_response(output: Output) -> OutputResponse:
    return OutputResponse(
        id=output.id,
        outcome_id=output.outcome_id,
        description=output.description,
        frequency_type=output.frequency_type,
        frequency_value=output.frequency_value,
        schedule_weekdays=output.schedule_weekdays or None,
        is_starter=output.is_starter,
        status=output.status,
        sort_order=output.sort_order,
    )


@router.get("/outcomes", response_model=List[OutcomeResponse])
async def list_outcomes(service: OutcomeService = Depends(get_outcome_service)):
    """List all outcomes, oldest first."""
    try:
        return [_outcome_response(outcome) for outcome in service.list_outcomes()]
    except Exception as e:
        raise to_http_exception(e)


@router.post("/outcomes", response_model=OutcomeResponse, status_code=201)
async def create_outcome(
    body: OutcomeCreate,
    service: OutcomeService = Depends(get_outcome_service),
):
    try:
        return _outcome_response(service.create_outcome(body.title, body.category))
    except Exception as e:
        raise to_http_exception(e)


@router.get("/outcomes/{outcome_id}/outputs", response_model=List[OutputResponse])
async def list_outcome_outputs(
    outcome_id: str,
    service: OutcomeService = Depends(get_outcome_service),
):
    """Active outputs of one outcome in display order."""
    try:
        service.get_outcome(outcome_id)
        return [_output_response(output) for output in service.list_outputs([outcome_id])]
    except Exception as e:
        raise to_http_exception(e)


@router.post("/outputs", response_model=OutputResponse, status_code=201)
async def create_output(
    body: OutputCreate,
    service: OutcomeService = Depends(get_outcome_service),
):
    """
    Create a recurring output.

    fixed_weekly outputs need schedule_weekdays; flexible_weekly outputs
    use frequency_value as the weekly target.
    """
    try:
        output = service.create_output(
            outcome_id=body.outcome_id,
            description=body.description,
            frequency_type=body.frequency_type,
            frequency_value=body.frequency_value,
            schedule_weekdays=body.schedule_weekdays,
            is_starter=body.is_starter,
        )
        return _output_response(output)
    except Exception as e:
        raise to_http_exception(e)
