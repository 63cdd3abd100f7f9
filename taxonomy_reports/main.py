"""
Taxonomy Earnings Reports
Main FastAPI application
"""
from fastapi import FastAPI
from contextlib import asynccontextmanager

from taxonomy_reports.config import get_settings
from taxonomy_reports.utils.logger import log
from taxonomy_reports import __version__

# Import routers
from taxonomy_reports.api import health, reports

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    log.info(f"Starting {settings.app_name} v{__version__}")
    log.info(f"Environment: {settings.environment}")

    # Initialize database
    try:
        from taxonomy_reports.models.base import init_db
        init_db()
        log.info("Database initialized")
    except Exception as e:
        log.error(f"Database initialization error: {str(e)}")

    yield

    # Shutdown
    log.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="""
    Store reports by taxonomy

    - Total sales and earnings per category and tag for a date range
    - Monthly sales and earnings averages per term
    - Parent terms followed by their children
    """,
    lifespan=lifespan
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(reports.router)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "status": "/status",
        "endpoints": {
            "earnings_by_taxonomy": "GET /reports/earnings-by-taxonomy?range=this_month",
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taxonomy_reports.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=settings.api_workers if not settings.debug else 1
    )
