"""Main FastAPI application with modularized routes."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.database import SessionLocal, init_db
from api.routes import attempts, auth, courses, tests, users
from api.services.auth_service import seed_admin
from api.services.cleanup_service import schedule_session_cleanup
from core.logging_setup import setup_console_logging

setup_console_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Quiz Platform API")

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
    """Initialize database, seed the admin and schedule cleanup on startup."""
    init_db()
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()
    schedule_session_cleanup()
    logger.info("Quiz Platform API started")


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# Include routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(courses.router)
app.include_router(tests.router)
app.include_router(attempts.router)
