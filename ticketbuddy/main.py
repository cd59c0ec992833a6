"""
TicketBuddy - Main Application
==============================

Ticket-tracking backend with AI-assisted classification and GitHub integration.

Modules:
- Tickets: submission, classification, triage updates
- Incidents: checkout diagnostic and the incident log
- GitHub: repository link, PR/issue bridge, webhooks, mirrors
- Copilot: dashboard chat assistant

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, heuristics and prompt builders
- Infrastructure: Database, LLM, GitHub REST client
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Configuration and Core
from ticketbuddy.config import settings
from ticketbuddy.core import ApplicationException

# Infrastructure
from ticketbuddy.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)
from ticketbuddy.infrastructure.llm import build_llm_client

# GitHub resync
from ticketbuddy.github.application import GitHubService
from ticketbuddy.github.infrastructure import (
    GitHubClient,
    ResyncScheduler,
    SQLAlchemyGitHubRepository,
)
from ticketbuddy.tickets.infrastructure import SQLAlchemyTicketRepository

# Module Routers
from ticketbuddy.tickets.interfaces import tickets_router
from ticketbuddy.incidents.interfaces import incidents_router
from ticketbuddy.github.interfaces import github_router
from ticketbuddy.copilot.interfaces import copilot_router

# Middleware
from ticketbuddy.shared.api import (
    CorrelationIDMiddleware,
    EdgeHeadersMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)

# Logging
from ticketbuddy.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


async def github_resync_job() -> Optional[Dict[str, int]]:
    """Background mirror resync of the linked repository."""
    async with get_session_context() as session:
        async with GitHubClient() as client:
            service = GitHubService(
                SQLAlchemyGitHubRepository(session),
                SQLAlchemyTicketRepository(session),
                client
            )
            return await service.resync()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database and create tables
    3. Build the LLM client (None when no model is configured)
    4. Start the GitHub resync scheduler when an interval is set

    SHUTDOWN:
    1. Stop the scheduler
    2. Close database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting TicketBuddy", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    init_database()
    await create_tables()

    app.state.llm_client = build_llm_client()
    if app.state.llm_client is None:
        logger.warning("No language model configured - classification uses heuristics, copilot disabled")

    scheduler: Optional[ResyncScheduler] = None
    if settings.github_resync_interval > 0:
        scheduler = ResyncScheduler(interval_seconds=settings.github_resync_interval)
        await scheduler.start(github_resync_job)

    logger.info("TicketBuddy started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down TicketBuddy")

    if scheduler:
        await scheduler.stop()

    await close_database()

    logger.info("TicketBuddy shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="TicketBuddy API",
    description="""
    ## Ticket tracking with AI-assisted triage and GitHub integration

    - `POST /tickets` splits a free-text request into tickets (model first, keyword heuristics as fallback)
    - `PATCH /tickets/{id}` moves tickets through open, in-progress, qa and resolved
    - `POST /mcp/call-tool` runs the checkout diagnostic and files an incident
    - `/github/*` links one repository, lists and merges PRs, manages issues, receives webhooks
    - `POST /copilot` chats with the dashboard assistant

    Every error body has the shape `{"error": message}`.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === Middleware (last added runs first) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_middleware(EdgeHeadersMiddleware)

# === Exception Handlers ===
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# === Include Module Routers ===
app.include_router(tickets_router)
app.include_router(incidents_router)
app.include_router(github_router)
app.include_router(copilot_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe."""
    return {"ok": True}


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "TicketBuddy",
        "version": settings.app_version,
        "environment": settings.environment,
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "tickets": ["GET /tickets", "POST /tickets", "GET /tickets/{id}", "PATCH /tickets/{id}"],
            "incidents": ["GET /incidents", "POST /mcp/call-tool"],
            "github": [
                "POST /github/link", "DELETE /github/link", "GET /github/summary", "GET /github/test",
                "GET /github/{owner}/{name}/prs", "POST /github/{owner}/{name}/pr/{number}/merge",
                "GET /github/{owner}/{name}/issues", "POST /github/{owner}/{name}/issues",
                "PATCH /github/{owner}/{name}/issues/{number}",
                "POST /github/{owner}/{name}/issues/{number}/comment",
                "GET /github/{owner}/{name}/events", "POST /github/webhook"
            ],
            "copilot": ["POST /copilot"]
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ticketbuddy.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
