"""
Server-rendered screens (logged by the visitor middleware)
"""
from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from core.config import TEMPLATES_DIR
from core.auth import is_admin_request
from core.database import get_db
from utils.pricing import load_catalog

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=TEMPLATES_DIR)


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, canceled: Optional[str] = None, db: Session = Depends(get_db)):
    return templates.TemplateResponse(request, "pages/home.html", {
        "pricing": load_catalog(db),
        "canceled": canceled == "true",
    })


@router.get("/pricing", response_class=HTMLResponse)
async def pricing_page(request: Request, db: Session = Depends(get_db)):
    return templates.TemplateResponse(request, "pages/pricing.html", {"pricing": load_catalog(db)})


@router.get("/contact", response_class=HTMLResponse)
async def contact_page(request: Request):
    return templates.TemplateResponse(request, "pages/contact.html", {})


@router.get("/payment/success", response_class=HTMLResponse)
async def payment_success(request: Request, session_id: Optional[str] = None):
    return templates.TemplateResponse(request, "pages/payment_success.html", {"session_id": session_id})


@router.get("/admin", response_class=HTMLResponse)
async def admin_page(request: Request):
    return templates.TemplateResponse(request, "pages/admin.html", {"authenticated": is_admin_request(request)})
