# ABOUTME: Health check endpoint
# ABOUTME: Liveness probe for the gateway process, no API key required

from fastapi import APIRouter

from docgateway.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health", responses={
    200: {"description": "Gateway is up", "content": {"application/json": {"example": {
        "status": "ok", "environment": "production"
    }}}}
})
async def health_check():
    """Returns gateway liveness and the deployment environment label."""
    return {"status": "ok", "environment": get_settings().environment}
