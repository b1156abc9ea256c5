"""Main FastAPI application with modularized routes."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from examprep.config import LOG_LEVEL
from examprep.database import init_db
from examprep.logging_setup import setup_console_logging
from examprep.routes import attempts, results
from examprep.services.attempt_service import active_attempt_count
from examprep.services.cleanup_service import schedule_attempts_cleanup
from examprep.utils import utc_now

setup_console_logging(LOG_LEVEL)

app = FastAPI(title="Exam Prep API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Initialize database and schedule cleanup tasks on startup."""
    init_db()
    schedule_attempts_cleanup()


@app.get("/api/health")
def health() -> dict[str, object]:
    return {"status": "ok", "time": utc_now(), "activeAttempts": active_attempt_count()}


# Include routers
app.include_router(attempts.router)
app.include_router(results.router)
