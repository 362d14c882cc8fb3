"""Health check endpoint."""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter

from adapter.mongodb.connection import get_mongodb_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
async def health():
    """Health check with dependency status. Always 200; ``status`` tells degraded apart."""
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        "services": {}
    }

    try:
        mongo_client = get_mongodb_client()
        if mongo_client:
            mongo_client.admin.command('ping')
            health_status["services"]["mongodb"] = {
                "status": "healthy",
                "message": "Connection successful"
            }
        else:
            health_status["services"]["mongodb"] = {
                "status": "unhealthy",
                "message": "Connection failed or not configured"
            }
    except Exception as e:
        logger.warning("Health check: MongoDB ping failed", extra={"error": str(e)[:200]})
        health_status["services"]["mongodb"] = {
            "status": "unhealthy",
            "message": "Connection error"
        }

    healthy = all(s["status"] == "healthy" for s in health_status["services"].values())
    if not healthy:
        health_status["status"] = "degraded"

    return {
        "success": True,
        "message": "API is running" if healthy else "API is running with degraded dependencies",
        "data": health_status,
    }
