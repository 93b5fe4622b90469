"""
Admin session: cookie login, status and logout
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from core.config import logger
from core.auth import (
    admin_credentials_configured,
    verify_admin_credentials,
    is_admin_request,
    set_admin_cookie,
    clear_admin_cookie,
)
from utils.request_info import get_request_info
from utils.rate_limit import check_login_rate_limit

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/auth")
async def admin_login(request: Request):
    try:
        body = await request.json()
    except Exception:
        body = {}
    if not isinstance(body, dict):
        body = {}
    email = str(body.get("email") or "").strip()
    password = str(body.get("password") or "")

    if not email or not password:
        return JSONResponse({"error": "Email and password are required"}, status_code=400)

    ip = get_request_info(request)["ip_address"]
    if not check_login_rate_limit(ip):
        logger.warning(f"[admin.auth] login rate limit exceeded for {ip}")
        return JSONResponse({"error": "Too many login attempts. Please try again later."}, status_code=429)

    if not admin_credentials_configured():
        logger.error("[admin.auth] ADMIN_EMAIL / ADMIN_PASSWORD are not configured")
        return JSONResponse({"error": "Admin authentication is not configured"}, status_code=500)

    if not verify_admin_credentials(email, password):
        logger.warning(f"[admin.auth] failed login from {ip}")
        return JSONResponse({"error": "Invalid email or password"}, status_code=401)

    logger.info(f"[admin.auth] admin logged in from {ip}")
    response = JSONResponse({"success": True})
    set_admin_cookie(response)
    return response


@router.get("/auth")
async def admin_status(request: Request):
    return {"authenticated": is_admin_request(request)}


@router.delete("/auth")
async def admin_logout():
    response = JSONResponse({"success": True})
    clear_admin_cookie(response)
    return response
