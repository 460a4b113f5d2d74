"""URL shortening API routes.

This module contains all endpoints for short URL operations:
- Create short URL (POST /shorturls)
- Get short URL statistics (GET /shorturls/{shortcode})
- Redirect to original URL (GET /{shortcode})
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from ...models.url import ShortURLCreate, ErrorResponse
from ...schemas.url import ShortURLCreateResponse, ShortURLStatsResponse
from ...services.links import LinkService, get_link_service

router = APIRouter(prefix="", tags=["URLs"])


def get_base_url(request: Request) -> str:
    """Get base URL for short links.

    Args:
        request: FastAPI request object.

    Returns:
        Configured public base URL, or the request's scheme and host.
    """
    public_base_url = request.app.state.settings.public_base_url
    if public_base_url:
        return public_base_url.rstrip("/")
    return str(request.base_url).rstrip("/")


@router.post(
    "/shorturls",
    response_model=ShortURLCreateResponse,
    status_code=201,
    responses={
        201: {"description": "Short URL created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Short code already exists"},
    },
    summary="Create a short URL",
    description="Create a new short URL from a long URL. Optionally specify a custom code.",
)
async def create_short_url_endpoint(
    request: Request,
    url_data: ShortURLCreate,
    service: LinkService = Depends(get_link_service),
) -> ShortURLCreateResponse:
    """Create a short URL from a long URL.

    Args:
        request: FastAPI request object.
        url_data: URL creation data.
        service: Link service instance.

    Returns:
        Short link and expiry.
    """
    request_id = getattr(request.state, "request_id", "-")
    service.shipper.info(
        service.stack, "api", f"URL shortening request {request_id} started"
    )
    options = {}
    # An omitted validity takes the default, an explicit null is rejected
    if "validity" in url_data.model_fields_set:
        options["validity"] = url_data.validity
    return service.create(
        url=url_data.url,
        custom_code=url_data.shortcode,
        base_url=get_base_url(request),
        **options,
    )


@router.get(
    "/shorturls/{shortcode}",
    response_model=ShortURLStatsResponse,
    responses={
        200: {"description": "Short URL statistics retrieved"},
        404: {"model": ErrorResponse, "description": "Short URL not found"},
        410: {"model": ErrorResponse, "description": "Short URL has expired"},
    },
    summary="Get short URL statistics",
    description="Get a short URL's details and its 10 most recent accesses.",
)
async def get_short_url_stats(
    shortcode: str,
    service: LinkService = Depends(get_link_service),
) -> ShortURLStatsResponse:
    """Get a short URL's details and its most recent accesses.

    Args:
        shortcode: The short URL code.
        service: Link service instance.

    Returns:
        Link details with the last 10 accesses, oldest first.
    """
    return service.inspect(shortcode)


@router.get(
    "/{shortcode}",
    response_class=RedirectResponse,
    status_code=302,
    responses={
        302: {"description": "Redirect to original URL"},
        404: {"model": ErrorResponse, "description": "Short URL not found"},
        410: {"model": ErrorResponse, "description": "Short URL has expired"},
    },
    summary="Redirect to original URL",
    description="Redirect to the original URL associated with the short code.",
)
async def redirect_to_url(
    shortcode: str,
    request: Request,
    service: LinkService = Depends(get_link_service),
) -> RedirectResponse:
    """Redirect to the original URL, recording the access.

    Args:
        shortcode: The short URL code.
        request: FastAPI request object.
        service: Link service instance.

    Returns:
        Redirect response to original URL.
    """
    original_url = service.redirect(
        shortcode,
        client_agent=request.headers.get("user-agent"),
        client_address=request.client.host if request.client else None,
    )
    return RedirectResponse(url=original_url, status_code=302)
