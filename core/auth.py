import hmac
from typing import Optional
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from core.config import ADMIN_EMAIL, ADMIN_PASSWORD, IS_PRODUCTION

ADMIN_COOKIE_NAME = "admin_session"
ADMIN_COOKIE_VALUE = "authenticated"
ADMIN_COOKIE_MAX_AGE = 60 * 60  # 1 hour


def admin_credentials_configured() -> bool:
    return bool(ADMIN_EMAIL) and bool(ADMIN_PASSWORD)


def verify_admin_credentials(email: str, password: str) -> bool:
    """Literal match of both fields against the configured pair.

    Both comparisons always run so the caller cannot tell which field failed.
    """
    email_ok = hmac.compare_digest(str(email).encode("utf-8"), ADMIN_EMAIL.encode("utf-8"))
    password_ok = hmac.compare_digest(str(password).encode("utf-8"), ADMIN_PASSWORD.encode("utf-8"))
    return email_ok and password_ok


def is_admin_request(request: Request) -> bool:
    return request.cookies.get(ADMIN_COOKIE_NAME) == ADMIN_COOKIE_VALUE


def require_admin(request: Request) -> Optional[JSONResponse]:
    """Stateless per-request guard. Returns a 401 response to short-circuit, or None."""
    if not is_admin_request(request):
        return JSONResponse({"error": "Unauthorized access"}, status_code=401)
    return None


def set_admin_cookie(response: Response) -> None:
    response.set_cookie(
        ADMIN_COOKIE_NAME,
        ADMIN_COOKIE_VALUE,
        max_age=ADMIN_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="strict",
    )


def clear_admin_cookie(response: Response) -> None:
    response.set_cookie(
        ADMIN_COOKIE_NAME,
        "",
        max_age=0,
        path="/",
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="strict",
    )
