"""
Pydantic schemas for API request/response validation.

These schemas provide:
- Type safety for API inputs and outputs
- Automatic validation and error messages
- OpenAPI documentation generation

Range checks on confidence and frequency live in the services so that
invalid values come back as 400 with the service's message.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response for API errors."""
    detail: str


# =============================================================================
# Outcome / Output Schemas
# =============================================================================

class OutcomeCreate(BaseModel):
    """Request body for creating an outcome."""
    title: str = Field(..., min_length=1, max_length=500)
    category: Optional[str] = None


class OutcomeResponse(BaseModel):
    id: str
    title: str
    category: Optional[str] = None
    created_at: Optional[str] = None


class OutputCreate(BaseModel):
    """Request body for creating a recurring output."""
    outcome_id: str
    description: str = Field(..., min_length=1, max_length=500)
    frequency_type: str = "daily"  # daily, fixed_weekly, flexible_weekly
    frequency_value: int = 1
    schedule_weekdays: Optional[List[int]] = None  # 0=Sun..6=Sat
    is_starter: bool = False


class OutputResponse(BaseModel):
    id: str
    outcome_id: str
    description: str
    frequency_type: str
    frequency_value: int
    schedule_weekdays: Optional[List[int]] = None
    is_starter: bool = False
    status: str = "active"
    sort_order: int = 0


# =============================================================================
# Skill Schemas
# =============================================================================

class SkillCreate(BaseModel):
    """Request body for creating a skill."""
    outcome_id: str
    name: str
    initial_confidence: int = 1
    target_label: Optional[str] = None
    target_value: Optional[float] = None


class SkillUpdate(BaseModel):
    """Request body for editing a skill's name, confidence and target."""
    name: str
    initial_confidence: int
    target_label: Optional[str] = None
    target_value: Optional[float] = None


class SkillStageUpdate(BaseModel):
    stage: str  # active, review, archived


class SkillResponse(BaseModel):
    id: str
    outcome_id: str
    name: str
    stage: str
    target_label: Optional[str] = None
    target_value: Optional[float] = None
    initial_confidence: int
    graduation_suppressed_at: Optional[str] = None
    created_at: Optional[str] = None


class SkillPriorityResponse(BaseModel):
    """A ranked skill with its score components."""
    skill: SkillResponse
    latest_confidence: int
    confidence_pressure: float
    recency_pressure: float
    target_pressure: float
    priority_score: float
    final_score: float
    days_since_last: int
    target_interval: float


class SkillSummaryResponse(BaseModel):
    skills_worked_count: int
    average_confidence_delta: Optional[float] = None


class GraduationResponse(BaseModel):
    skill_id: str
    eligible: bool


# =============================================================================
# Action Log Schemas
# =============================================================================

class SkillLogInput(BaseModel):
    skill_item_id: str
    confidence: int
    target_result: Optional[float] = None


class ActionLogCreate(BaseModel):
    """
    Request body for recording an output's progress on a day.

    skill_logs replaces the skill logs attached to the action log; omit it
    to leave them untouched.
    """
    output_id: str
    action_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    completed: float = 0
    total: float = 1
    notes: Optional[str] = None
    skill_logs: Optional[List[SkillLogInput]] = None


class ActionLogSaveResponse(BaseModel):
    action_log_id: str
    completed: float
    created: bool
    skill_logs_created: List[str] = []
    graduation_candidates: List[str] = []


# =============================================================================
# Dashboard Schemas
# =============================================================================

class WeeklyProgressSchema(BaseModel):
    completed: float
    target: float
    rate: int
    target_met: bool


class TodayLogSchema(BaseModel):
    completed: float
    total: float
    notes: Optional[str] = None


class DashboardOutputSchema(BaseModel):
    id: str
    description: str
    frequency_type: str
    frequency_value: int
    schedule_weekdays: Optional[List[int]] = None
    is_starter: bool = False
    scheduled_today: bool
    today_log: Optional[TodayLogSchema] = None
    weekly_progress: WeeklyProgressSchema


class DashboardOutcomeSchema(BaseModel):
    id: str
    title: str
    category: Optional[str] = None
    outputs: List[DashboardOutputSchema] = []


class DashboardStats(BaseModel):
    scheduled_count: int
    completed_count: int
    completion_rate: int


class DashboardResponse(BaseModel):
    """Complete daily dashboard payload."""
    generated_at: str
    date: str
    week_start: str
    week_end: str
    start_of_week: int
    missed_yesterday_count: int
    stats: DashboardStats
    outcomes: List[DashboardOutcomeSchema]
    top_suggestions: List[SkillPriorityResponse]
    suggestions_by_outcome: Dict[str, List[SkillPriorityResponse]]
    skill_summary: Dict[str, SkillSummaryResponse]
