"""Main FastAPI application with modularized routes."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assessment_api.database import init_db
from assessment_api.logging_setup import setup_console_logging
from assessment_api.routes import attempts, content, sessions, templates

setup_console_logging()

app = FastAPI(title="Assessment Engine API")

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
    """Initialize database on startup."""
    init_db()


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# Include routers
app.include_router(templates.router)
app.include_router(content.router)
app.include_router(attempts.router)
app.include_router(sessions.router)
