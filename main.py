from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.background import BackgroundTask
import os

from core.config import logger, ALLOWED_ORIGINS, IS_PRODUCTION, STATIC_DIR  # type: ignore
from utils.request_info import get_request_info, get_geo, extract_utm_params, generate_session_id
from utils.tracking import log_visitor

# Routers
from routers import (
    pages, places, searched_gmb, payments, stripe_webhook, pricing,
    admin_auth, admin_orders, analytics, visitors, contact,
)  # type: ignore

app = FastAPI(title="MapWipers")

# ---- CORS setup ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

SESSION_COOKIE_NAME = "session_id"
SESSION_COOKIE_MAX_AGE = 30 * 24 * 60 * 60  # 30 days
_UNTRACKED_PREFIXES = ("/api/", "/static/", "/_next/", "/favicon.ico")


def _is_tracked_path(path: str) -> bool:
    if path.startswith(_UNTRACKED_PREFIXES):
        return False
    # Asset-like paths (robots.txt, sitemap.xml, ...)
    return "." not in path


# --- Visitor logging + session cookie ---
@app.middleware("http")
async def track_visitors(request: Request, call_next):
    path = request.url.path
    if not _is_tracked_path(path):
        return await call_next(request)

    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    is_new_session = not session_id
    if is_new_session:
        session_id = generate_session_id()

    record = {
        **get_request_info(request),
        **get_geo(request),
        **extract_utm_params(str(request.url)),
        "page_path": path,
        "session_id": session_id,
    }

    response = await call_next(request)
    try:
        # Runs after the response is sent; never delays the page
        response.background = BackgroundTask(log_visitor, record)
        if is_new_session:
            response.set_cookie(
                SESSION_COOKIE_NAME,
                session_id,
                max_age=SESSION_COOKIE_MAX_AGE,
                path="/",
                httponly=True,
                secure=IS_PRODUCTION,
                samesite="lax",
            )
    except Exception as ex:
        logger.warning(f"[tracking.visitor] could not attach visitor log for {path}: {ex}")
    return response


# --- Security headers ---
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    try:
        if IS_PRODUCTION:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
        csp = (
            "default-src 'self'; "
            "img-src 'self' data: https://maps.googleapis.com https://*.googleusercontent.com; "
            "style-src 'self' 'unsafe-inline'; "
            "script-src 'self' https://js.stripe.com; "
            "connect-src 'self'; "
            "frame-src https://checkout.stripe.com https://js.stripe.com; "
            "object-src 'none'; "
            "base-uri 'self'; "
            "form-action 'self' https://checkout.stripe.com; "
            "frame-ancestors 'none'"
        )
        response.headers.setdefault("Content-Security-Policy", csp)
    except Exception as ex:
        logger.warning(f"[security_headers] failed to set headers: {ex}")
    return response


if os.path.isdir(STATIC_DIR):
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

app.include_router(pages.router)
app.include_router(places.router)
app.include_router(searched_gmb.router)
app.include_router(payments.router)
app.include_router(stripe_webhook.router)
app.include_router(pricing.router)
app.include_router(admin_auth.router)
app.include_router(admin_orders.router)
app.include_router(analytics.router)
app.include_router(visitors.router)
app.include_router(contact.router)


@app.on_event("startup")
async def _init_schema():
    try:
        from core.database import init_db, SessionLocal
        from utils.pricing import seed_default_pricing
        init_db()
        db = SessionLocal()
        try:
            seed_default_pricing(db)
        finally:
            db.close()
    except Exception as _ex:
        logger.warning(f"init_db failed: {_ex}")


@app.get("/api/health")
async def health():
    return {"ok": True}
