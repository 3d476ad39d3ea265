"""
Outcome Tracker FastAPI Backend

Entry point for the API server that exposes outcomes, outputs, daily
action logs and skill practice to a frontend.

Architecture:
- FastAPI handles HTTP routing and request/response validation
- Pydantic schemas ensure type safety
- Services handle all business logic
- The row store provides persistence via SQLite (or memory with TRACKER_DB=memory)

Run with:
    uvicorn backend.main:app --reload --port 8000

Or:
    python -m backend.main
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Add project root to path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from backend.dependencies import get_config, get_database
from backend.routers import (
    action_logs_router,
    dashboard_router,
    outcomes_router,
    skills_router,
)

logger = logging.getLogger("tracker.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup verifies the row store can be opened; the app still starts
    without it and endpoints report the error.
    """
    try:
        db = get_database()
        config = get_config()
        logger.info("Database connected: %s", db.db_path)
        logger.info("Config loaded from: %s", config.config_dir)
    except FileNotFoundError as e:
        logger.error("%s", e)
        logger.error("Run 'python scripts/init_db.py' or 'tracker init' to create the database.")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="Outcome Tracker API",
    description="""
    Outcome, output and skill practice tracking API.

    ## Features

    - **Outcomes**: Goals grouping recurring outputs and skills
    - **Outputs**: Daily, fixed-weekday or flexible weekly actions with weekly progress
    - **Action logs**: One progress record per output per day, with skill confidence logs
    - **Skills**: Practice priority queue, weekly summary and graduation to review
    - **Dashboard**: Everything scheduled for a day in one payload
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(dashboard_router)
app.include_router(outcomes_router)
app.include_router(skills_router)
app.include_router(action_logs_router)


@app.get("/")
async def root():
    """API root - returns basic info and available endpoints."""
    return {
        "name": "Outcome Tracker API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "dashboard": "/dashboard/daily",
            "outcomes": "/outcomes",
            "outputs": "/outputs",
            "skills": "/skills/queue",
            "action_logs": "/action-logs",
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    try:
        db = get_database()
        db.select('outcomes', limit=1)
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


# Allow running directly with: python -m backend.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
