import html
import logging
import re
from typing import Optional
from urllib.parse import urlencode

from app.core.config import API_PUBLIC_URL

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r'href=["\']([^"\']+)["\']')


def _tracking_params(email: Optional[str], msgid: Optional[str], campaign: Optional[str]) -> dict:
    return {k: v for k, v in (("email", email), ("msgid", msgid), ("campaign", campaign)) if v}


def build_open_pixel_url(email: Optional[str] = None, msgid: Optional[str] = None, campaign: Optional[str] = None) -> str:
    query = urlencode(_tracking_params(email, msgid, campaign))
    return f"{API_PUBLIC_URL}/api/track/open" + (f"?{query}" if query else "")


def build_click_url(url: str, email: Optional[str] = None, msgid: Optional[str] = None, campaign: Optional[str] = None) -> str:
    params = {"url": url, **_tracking_params(email, msgid, campaign)}
    return f"{API_PUBLIC_URL}/api/track/click?{urlencode(params)}"


def add_tracking(body_html: str, email: Optional[str] = None, msgid: Optional[str] = None, campaign: Optional[str] = None) -> str:
    """
    Route every http(s) link in an email body through the click tracker and
    append the open pixel.
    """
    if not body_html:
        return body_html

    def replace_link(match):
        original_url = html.unescape(match.group(1)).strip()
        if "/api/track/" in original_url:
            return match.group(0)
        if not original_url.lower().startswith(("http://", "https://")):
            # mailto:, anchors and template placeholders stay untouched
            return match.group(0)
        return f'href="{html.escape(build_click_url(original_url, email, msgid, campaign))}"'

    tracked = LINK_PATTERN.sub(replace_link, body_html)
    pixel = html.escape(build_open_pixel_url(email, msgid, campaign))
    logger.debug(f"[TRACKING] Added tracking to email body for {email or 'anonymous'} (campaign={campaign})")
    return f'{tracked}<img src="{pixel}" width="1" height="1" alt="" style="display:none" />'
