"""
API routers for the Outcome Tracker backend.

Each router handles a specific domain:
- dashboard: Aggregated daily dashboard
- outcomes: Outcomes and their recurring outputs
- skills: Skills, priority queue, weekly summary and graduation
- action_logs: Daily progress and skill confidence logging
"""

from .dashboard import router as dashboard_router
from .outcomes import router as outcomes_router
from .skills import router as skills_router
from .action_logs import router as action_logs_router

__all__ = [
    'dashboard_router',
    'outcomes_router',
    'skills_router',
    'action_logs_router',
]
