import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import RedirectResponse, Response

from app.models.details import TrackingDetails
from app.models.enums import TrackingKind
from app.services.tracking import is_safe_redirect, tracking_service

logger = logging.getLogger(__name__)
router = APIRouter()

# 1x1 transparent GIF pixel
TRACKING_PIXEL = (
    b'\x47\x49\x46\x38\x39\x61\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff'
    b'\x00\x00\x00\x21\xf9\x04\x01\x00\x00\x00\x00\x2c\x00\x00\x00\x00'
    b'\x01\x00\x01\x00\x00\x02\x02\x44\x01\x00\x3b'
)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _request_details(request: Request, **values) -> TrackingDetails:
    return TrackingDetails(
        user_agent=request.headers.get("user-agent"),
        ip=request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip"),
        **values,
    )


@router.get("/track/open")
async def track_email_open(
    request: Request,
    email: Optional[str] = Query(None, description="Recipient address"),
    msgid: Optional[str] = Query(None, description="Message id"),
    campaign: Optional[str] = Query(None, description="Email campaign id"),
    redirect: Optional[str] = Query(None, description="Optional redirect after tracking"),
):
    """
    Records an email open and serves the tracking pixel. With a valid
    'redirect' the client is sent there instead, even if bookkeeping fails.
    """
    if redirect is not None and not is_safe_redirect(redirect):
        logger.warning(f"[TRACKING] Rejected open redirect target: {redirect}")
        return Response(content="Invalid redirect URL", status_code=400)

    details = _request_details(request, email=email, msgid=msgid, campaign=campaign)
    try:
        await tracking_service.record(TrackingKind.OPEN, details)
        logger.info(f"[TRACKING] Email open tracked for {email or 'anonymous'} (campaign={campaign}, msgid={msgid})")
    except Exception as e:
        logger.error(f"[TRACKING] Error processing email open for {email or 'anonymous'}: {e}", exc_info=True)
        if redirect:
            return RedirectResponse(url=redirect, status_code=307)
        return Response(status_code=500)

    if redirect:
        return RedirectResponse(url=redirect, status_code=307)
    return Response(content=TRACKING_PIXEL, media_type="image/gif", headers=NO_CACHE_HEADERS)


@router.get("/track/click")
async def track_link_click(
    request: Request,
    url: Optional[str] = Query(None, description="Original URL"),
    email: Optional[str] = Query(None, description="Recipient address"),
    msgid: Optional[str] = Query(None, description="Message id"),
    campaign: Optional[str] = Query(None, description="Email campaign id"),
):
    """
    Records a link click and redirects (307) to the original URL. Only
    absolute http/https targets are accepted.
    """
    if not url:
        return Response(content="Missing target url", status_code=400)
    if not is_safe_redirect(url):
        logger.warning(f"[TRACKING] Rejected click target: {url}")
        return Response(content="Invalid target URL", status_code=400)

    target = url.strip()
    details = _request_details(request, email=email, msgid=msgid, campaign=campaign, target=target)
    try:
        await tracking_service.record(TrackingKind.CLICK, details)
    except Exception as e:
        await tracking_service.record_failure(TrackingKind.CLICK, details, e)
        return Response(status_code=500)

    logger.info(f"[TRACKING] Click tracked for {email or 'anonymous'}, redirecting to {target}")
    return RedirectResponse(url=target, status_code=307, headers={**NO_CACHE_HEADERS, "X-Content-Type-Options": "nosniff"})
