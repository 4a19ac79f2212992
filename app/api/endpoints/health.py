from fastapi import APIRouter, HTTPException
from typing import Dict, Any
import logging

from app.db.async_session import check_async_database_health

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=Dict[str, Any])
async def health_check():
    """
    Database health check.

    Returns:
        dict: Health status with connection test, pool info and response time
    """
    health_status = await check_async_database_health()

    if health_status["status"] != "healthy":
        logger.error(f"Health check failed: {health_status.get('error')}")
        raise HTTPException(status_code=503, detail="Service unavailable")

    return {**health_status, "service": "blog-data-api"}
