import random
import string
import time
from typing import Optional
from urllib.parse import urlsplit, parse_qs, unquote

from fastapi import Request

UTM_PARAMS = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content", "gtm_from")

_SESSION_ALPHABET = string.digits + string.ascii_lowercase


def get_request_info(request: Request) -> dict:
    """Client IP, user agent and referer of an incoming request.

    IP resolution: x-forwarded-for (first segment) -> x-real-ip -> remote-addr -> "unknown".
    """
    headers = request.headers
    ip = (
        headers.get("x-forwarded-for")
        or headers.get("x-real-ip")
        or headers.get("remote-addr")
        or "unknown"
    )
    return {
        "ip_address": ip.split(",")[0].strip() or "unknown",
        "user_agent": headers.get("user-agent") or "unknown",
        "referer": headers.get("referer") or None,
    }


def get_geo(request: Request) -> dict[str, Optional[str]]:
    """Country / city as stamped by the edge proxy, when present."""
    headers = request.headers
    country = headers.get("cf-ipcountry") or headers.get("x-vercel-ip-country")
    city = headers.get("x-vercel-ip-city") or headers.get("cf-ipcity")
    if country in ("XX", "T1"):
        country = None
    return {"country": country or None, "city": unquote(city) if city else None}


def extract_utm_params(url: str) -> dict[str, Optional[str]]:
    """Campaign tags from a full request URL; absent or empty tags map to None."""
    try:
        query = parse_qs(urlsplit(str(url)).query, keep_blank_values=False)
    except (TypeError, ValueError):
        return {k: None for k in UTM_PARAMS}
    return {k: (query.get(k) or [None])[0] or None for k in UTM_PARAMS}


def generate_session_id() -> str:
    """Opaque correlation token: sess_<ms timestamp>_<9 base36 chars>.

    Not a credential; uniqueness is best-effort.
    """
    suffix = "".join(random.choice(_SESSION_ALPHABET) for _ in range(9))
    return f"sess_{int(time.time() * 1000)}_{suffix}"
