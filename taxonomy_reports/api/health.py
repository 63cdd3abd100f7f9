"""
Health check and status endpoints
"""
from fastapi import APIRouter
from datetime import datetime
from taxonomy_reports.config import get_settings
from taxonomy_reports import __version__

settings = get_settings()

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": __version__
    }


@router.get("/status")
async def get_status():
    """Get system status"""
    return {
        "app_name": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "reports": {
            "content_type": settings.report_content_type,
            "default_range": settings.default_report_range,
            "timezone": settings.report_timezone,
        },
        "timestamp": datetime.utcnow().isoformat()
    }
