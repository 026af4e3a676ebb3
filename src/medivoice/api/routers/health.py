"""
Health check endpoints.
"""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import BaseModel

from ... import __version__
from ..deps import EnrichmentServiceDep, SettingsDep
from ..schemas.common import ApiResponse
from ..utils.responses import ok

logger = logging.getLogger("medivoice")

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    version: str
    service: str


async def check_database(settings: SettingsDep) -> bool:
    """Ping MongoDB with a short server selection timeout."""
    client = AsyncIOMotorClient(settings.database.uri, serverSelectionTimeoutMS=5000)
    try:
        await client.admin.command("ping")
        return True
    except Exception as e:
        logger.warning(f"⚠️  Database ping failed: {e}")
        return False
    finally:
        client.close()


DatabaseReachable = Annotated[bool, Depends(check_database)]


@router.get("", response_model=ApiResponse[HealthResponse])
async def health_check(request: Request, settings: SettingsDep):
    """
    Health check endpoint.

    Returns the current status of the service.
    """
    return ok(
        request,
        data=HealthResponse(
            status="healthy",
            timestamp=datetime.utcnow(),
            version=__version__,
            service=settings.app_name,
        ),
        message="OK",
    )


@router.get("/live", response_model=ApiResponse[dict])
async def liveness_check(request: Request):
    return ok(request, data={"status": "alive", "timestamp": datetime.utcnow()}, message="OK")


@router.get("/ready", response_model=ApiResponse[dict])
async def readiness_check(
    request: Request,
    settings: SettingsDep,
    database_ok: DatabaseReachable,
    enrichment_service: EnrichmentServiceDep,
):
    """
    Readiness check endpoint.

    The database and the language model are required; N-ATLAS enrichment
    is optional and only reported.
    """
    checks = {"database": "ok" if database_ok else "unreachable"}

    try:
        checks["natlas"] = "ok" if await enrichment_service.check_health() else "degraded"
    except Exception as e:
        checks["natlas"] = f"error: {str(e)[:50]}"

    if settings.azure_openai.is_configured:
        checks["azure_openai"] = "configured"
        checks["azure_openai_chat_deployment"] = settings.azure_openai.deployment_name
    else:
        checks["azure_openai"] = "not_configured"

    all_ok = database_ok and settings.azure_openai.is_configured
    return ok(
        request,
        data={
            "status": "ready" if all_ok else "degraded",
            "timestamp": datetime.utcnow(),
            "checks": checks,
        },
        message="OK" if all_ok else "Some services unavailable",
    )
