"""
Contact form: validate, throttle and queue team notification + auto-reply
"""
from fastapi import APIRouter, Request, BackgroundTasks
from fastapi.responses import JSONResponse

from core.config import logger
from utils.emailing import send_contact_email, send_auto_reply
from utils.rate_limit import check_contact_rate_limit
from utils.request_info import get_request_info
from utils.validation import first_missing, is_valid_email

router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("")
async def submit_contact(request: Request, background_tasks: BackgroundTasks):
    try:
        body = await request.json()
    except Exception:
        body = {}
    if not isinstance(body, dict):
        body = {}

    if first_missing(body, ("name", "email", "subject", "message")):
        return JSONResponse({"error": "Missing required fields"}, status_code=400)
    name = str(body["name"]).strip()
    email = str(body["email"]).strip()
    subject = str(body["subject"]).strip()
    message = str(body["message"])
    if not is_valid_email(email):
        return JSONResponse({"error": "Invalid email format"}, status_code=400)

    ip = get_request_info(request)["ip_address"]
    if not check_contact_rate_limit(ip):
        logger.warning(f"[contact] rate limit exceeded for {ip}")
        return JSONResponse({"error": "Too many messages. Please try again later."}, status_code=429)

    business_name = body.get("businessName") or None
    urgency = body.get("urgency") or "normal"
    logger.info(f"[contact] submission from {email} subject='{subject}' urgency={urgency}")

    background_tasks.add_task(send_contact_email, name, email, subject, message, business_name, urgency)
    background_tasks.add_task(send_auto_reply, name, email, subject)

    return {"success": True, "message": "Contact form submitted successfully"}


@router.get("")
async def contact_method_not_allowed():
    return JSONResponse({"error": "Method not allowed"}, status_code=405)
