"""
Bank Feedback Triage - Main Application
========================================

Customer feedback intake and issue triage backend for bank service
channels (ATM, OnlineBanking, CoreBanking).

Modules:
- Feedback: CRUD, filtering and CSV import
- Issues: LLM / keyword issue detection and the review workflow
- Employees: Staff registry and feedback interactions
- Analytics: Dashboard aggregates

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, rules and value objects
- Infrastructure: Database, LLM, rules hot-reload, scheduler
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Configuration
from feedback_triage.config import settings

# Infrastructure
from feedback_triage.infrastructure.database import (
    init_database,
    close_database,
    create_tables,
    get_session_context,
    ping_database,
)
from feedback_triage.infrastructure.llm import create_llm_client

# Issues Module - External services
from feedback_triage.issues.infrastructure import (
    DetectionRulesManager,
    DetectionScheduler,
    LLMClientAdapter,
)

# Module Routers
from feedback_triage.feedback.interfaces import feedback_router
from feedback_triage.issues.interfaces import issues_router, build_detection_service
from feedback_triage.employees.interfaces import employees_router
from feedback_triage.analytics.interfaces import analytics_router

# Middleware and logging
from feedback_triage.shared.api.middleware import install_middleware, request_stats
from feedback_triage.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database and create tables
    3. Load detection rules and watch the file
    4. Initialize LLM client behind a circuit breaker
    5. Start the detection sweep scheduler

    SHUTDOWN:
    1. Stop scheduler
    2. Stop rules watcher
    3. Close LLM client and database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment, json_format=settings.log_format == "json")
    logger.info("Starting Feedback Triage Service", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Initializing database")
    init_database()

    # Tables are created on startup; if the database is not reachable the
    # server still starts and database endpoints fail until it is
    logger.info("Creating database tables")
    try:
        await create_tables()
    except Exception as e:
        logger.warning(f"Database not available - running in degraded mode: {e}")

    logger.info("Loading detection rules")
    rules_manager = DetectionRulesManager()
    rules_manager.load(settings.detection_rules_path)
    rules_manager.start_watching()

    logger.info("Initializing LLM client")
    llm_client = create_llm_client()
    llm_adapter = LLMClientAdapter(llm_client) if llm_client else None
    if llm_adapter is None:
        logger.warning("LLM not configured - issue detection uses keyword rules only")

    app.state.rules_manager = rules_manager
    app.state.llm_adapter = llm_adapter

    async def detection_sweep_job():
        """Background detection over feedback not analysed yet."""
        async with get_session_context() as session:
            service = build_detection_service(session, app.state)
            counts = await service.sweep(settings.detection_batch_size)
        if counts:
            logger.info(
                "Detection sweep complete",
                extra={"processed": sum(counts.values()), "outcomes": counts}
            )

    scheduler = DetectionScheduler(interval_seconds=settings.detection_interval_seconds)
    try:
        await scheduler.start(detection_sweep_job)
    except Exception as e:
        logger.warning(f"Detection scheduler not started: {e}")
    app.state.scheduler = scheduler

    logger.info("Feedback Triage Service started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Feedback Triage Service")

    await scheduler.stop()
    rules_manager.stop_watching()

    if llm_adapter:
        await llm_adapter.close()

    await close_database()

    logger.info("Feedback Triage Service shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Bank Feedback Triage API",
    description="""
    ## Customer Feedback Intake and Issue Triage

    Collects customer reviews of bank service channels, detects recurring
    problems with an LLM (keyword rules as fallback) and routes them
    through a human review workflow.

    ---

    ### Feedback

    - `GET/POST /api/feedback` - List with filters / submit feedback
    - `GET/PUT/DELETE /api/feedback/{id}` - Read, update, delete
    - `POST /api/feedback/{id}/detect-issues` - Run issue detection now
    - `POST /api/import-csv` - Bulk import from CSV

    ### Issues

    - `/api/pending-issues` - Detected issues awaiting review:
      approve, reject, merge, edit and draft resolutions
    - `/api/issues` - Master issue list
    - `/api/rejected-issues` - Rejection archive (suppresses re-detection)

    ### Analytics and Employees

    - `GET /api/metrics`, `GET /api/analytics/*` - Dashboard aggregates
    - `/api/employees` - Staff and their feedback interactions

    ---

    **Sentiment:** ratings 4-5 are positive, 1-3 negative.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware and exception handlers (from shared) ===
install_middleware(app)

# === Include Module Routers ===
app.include_router(feedback_router)
app.include_router(issues_router)
app.include_router(employees_router)
app.include_router(analytics_router)


# === Health Check Endpoints ===

HEALTH_EXAMPLE = {
    "status": "healthy",
    "version": "1.0.0",
    "environment": "development",
    "checks": {
        "database": "connected",
        "llm_client": "available (circuit closed)",
        "detection_rules": "loaded (4 rules)",
        "detection_scheduler": "running"
    },
    "requests": {"requests": 1250, "server_errors": 0}
}


async def _health(request: Request) -> dict:
    state = request.app.state

    try:
        await ping_database()
        database = "connected"
    except Exception as e:
        database = f"error: {e}"

    llm_adapter = getattr(state, "llm_adapter", None)
    rules_manager = getattr(state, "rules_manager", None)
    scheduler = getattr(state, "scheduler", None)

    checks = {
        "database": database,
        "llm_client": (
            f"available (circuit {llm_adapter.circuit_state})" if llm_adapter else "not_configured"
        ),
        "detection_rules": (
            f"loaded ({len(rules_manager.rule_set.rules)} rules)" if rules_manager else "defaults"
        ),
        "detection_scheduler": "running" if scheduler and scheduler.is_running else "stopped",
    }

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks,
        "requests": request_stats.summary()
    }


@app.get("/health", tags=["Health"], responses={
    200: {"description": "Service health", "content": {"application/json": {"example": HEALTH_EXAMPLE}}}
})
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Reports database connectivity, LLM availability, loaded detection
    rules, scheduler state and request counters since startup.
    """
    return await _health(request)


@app.get("/api/health", tags=["Health"], responses={
    200: {"description": "Service health", "content": {"application/json": {"example": HEALTH_EXAMPLE}}}
})
async def api_health_check(request: Request):
    return await _health(request)


@app.get("/api/test-connection", tags=["Health"], responses={
    503: {"description": "Database unreachable"}
})
async def test_connection():
    """Ping the database."""
    try:
        await ping_database()
    except Exception as e:
        logger.error(f"Database connection test failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "success": False,
                "message": "Database connection failed",
                "details": str(e)
            }
        )
    return {"success": True, "message": "Database connection successful"}


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Bank Feedback Triage",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "feedback": ["/api/feedback", "/api/import-csv"],
            "issues": ["/api/pending-issues", "/api/issues", "/api/rejected-issues"],
            "employees": ["/api/employees"],
            "analytics": ["/api/metrics", "/api/analytics"]
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "feedback_triage.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
