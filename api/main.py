"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, stats, trains
from core.config import settings
from core.logging import setup_logging
import logging
from api.middleware import RequestContextMiddleware
from ingestion.scheduler import PlanningImportScheduler

setup_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Train Formation Planning Import",
    description="Status API for the train formation planning import worker",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Initialize Scheduler
scheduler = PlanningImportScheduler()


# Include routers
app.include_router(health.router)
app.include_router(stats.router)
app.include_router(trains.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting train formation planning import")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    
    scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down train formation planning import")
    scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Train Formation Planning Import",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "trains": "/trains",
            "stats": "/stats"
        }
    }
