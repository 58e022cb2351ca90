"""
FastAPI Application Entry Point
Main application setup and route registration
"""

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from eventledger.config import settings
from eventledger.database import database, connect_db, disconnect_db, run_migrations
from eventledger.errors import LedgerError
from eventledger.logging_config import setup_logging
from eventledger.services.identity_service import identity_service

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Event registration and attendance ledger",
    version=settings.APP_VERSION,
    debug=settings.DEBUG
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Domain errors become a JSON body with a stable code clients can branch on"""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Unexpected failures are logged; clients get no internal detail"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "storage_error"}
    )


async def seed_bootstrap_admin():
    """Create the configured admin account if it does not exist yet"""
    if not (settings.BOOTSTRAP_ADMIN_EMAIL and settings.BOOTSTRAP_ADMIN_PASSWORD):
        return
    user, created = await identity_service.ensure_admin(
        settings.BOOTSTRAP_ADMIN_NAME,
        settings.BOOTSTRAP_ADMIN_EMAIL,
        settings.BOOTSTRAP_ADMIN_PASSWORD
    )
    if created:
        logger.info("Bootstrap admin %s created", user["email"])


# Startup event
@app.on_event("startup")
async def startup():
    """Migrate the schema, then open the connection pool"""
    setup_logging()
    run_migrations()
    await connect_db()
    await seed_bootstrap_admin()
    logger.info("%s started in %s mode", settings.APP_NAME, settings.APP_ENV)


# Shutdown event
@app.on_event("shutdown")
async def shutdown():
    """Run on application shutdown"""
    await disconnect_db()
    logger.info("%s stopped", settings.APP_NAME)


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    try:
        await database.fetch_val("SELECT 1")
        db_status = "connected"
    except Exception:
        logger.exception("Health check could not reach the database")
        db_status = "unavailable"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": db_status
    }


# Import and include routers
from eventledger.routes import auth, events, registrations, attendance, stats, ai

app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(events.router, prefix="/events", tags=["Events"])
app.include_router(registrations.router, tags=["Registrations"])
app.include_router(attendance.router, tags=["Attendance"])
app.include_router(stats.router, tags=["Statistics"])
app.include_router(ai.router, prefix="/ai", tags=["AI Insights"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "eventledger.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
