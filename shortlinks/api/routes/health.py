"""Health check API routes."""

from fastapi import APIRouter, Depends, Request

from ...core.log_shipper import LogShipper, get_log_shipper
from ...core.registry import LinkRegistry, get_registry
from ...schemas.url import HealthResponse
from ...utils.shortener import utc_now

router = APIRouter(tags=["Health"])


@router.get("/api/health", response_model=HealthResponse, summary="Health check")
async def health_check(
    request: Request,
    registry: LinkRegistry = Depends(get_registry),
    shipper: LogShipper = Depends(get_log_shipper),
) -> HealthResponse:
    """Health check endpoint.

    Returns:
        Health status, current time and number of registered short URLs.
    """
    shipper.info(request.app.state.settings.log_stack, "api", "Health check requested")
    return HealthResponse(
        status="healthy",
        timestamp=utc_now(),
        total_urls=len(registry),
    )
