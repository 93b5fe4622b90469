import smtplib
import uuid
from datetime import datetime, timezone
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import parseaddr
from typing import Optional
from jinja2 import Environment, FileSystemLoader, select_autoescape
import os

from core.config import (
    SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, MAIL_FROM, ADMIN_NOTIFY_EMAIL, SITE_URL, logger, TEMPLATES_DIR,
)

# Jinja env
_jinja_env = Environment(
    loader=FileSystemLoader(os.path.join(TEMPLATES_DIR, "emails")),
    autoescape=select_autoescape(["html", "xml"]),
)

APP_NAME = os.getenv("APP_NAME", "MapWipers")
EMAIL_BRAND_BG = os.getenv("EMAIL_BRAND_BG", "#0F1115")
EMAIL_BRAND_BUTTON_BG = os.getenv("EMAIL_BRAND_BUTTON_BG", "#2563EB")
EMAIL_BRAND_BUTTON_TEXT = os.getenv("EMAIL_BRAND_BUTTON_TEXT", "#FFFFFF")

URGENCY_LABELS = {"urgent": "URGENT", "high": "High priority", "normal": "Contact", "low": "Contact"}


def render_email(template_name: str, **context) -> str:
    base = {
        "app_name": APP_NAME,
        "brand_bg": EMAIL_BRAND_BG,
        "button_bg": EMAIL_BRAND_BUTTON_BG,
        "button_text": EMAIL_BRAND_BUTTON_TEXT,
        "site_url": SITE_URL,
    }
    base.update(context or {})
    return _jinja_env.get_template(template_name).render(**base)


def send_email_smtp(
    to_addr: str,
    subject: str,
    html: str,
    text: Optional[str] = None,
    from_addr: Optional[str] = None,
    reply_to: Optional[str] = None,
) -> bool:
    try:
        if not SMTP_HOST or not SMTP_PASS or not MAIL_FROM:
            logger.error("[email] SMTP not configured; cannot send email")
            return False
        display_from = (from_addr or MAIL_FROM).strip()
        # Envelope sender is the bare address of the display From
        sender = parseaddr(display_from)[1] or display_from

        domain = sender.split("@")[-1] if "@" in sender else "mapwipers.com"
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = display_from
        msg["To"] = to_addr
        msg["Message-ID"] = f"<{uuid.uuid4()}@{domain}>"
        msg["Date"] = datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S +0000")
        if reply_to:
            msg["Reply-To"] = reply_to
        if not text:
            text = "Open this message in an HTML-capable email client."
        msg.attach(MIMEText(text or "", "plain", _charset="utf-8"))
        msg.attach(MIMEText(html or "", "html", _charset="utf-8"))

        if SMTP_PORT == 465:
            server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT)
        else:
            server = smtplib.SMTP(SMTP_HOST, SMTP_PORT)
        with server:
            if SMTP_PORT != 465:
                server.starttls()
            if SMTP_USER or SMTP_PASS:
                server.login(SMTP_USER, SMTP_PASS)
            server.sendmail(sender, [to_addr], msg.as_string())
        return True
    except Exception as ex:
        logger.exception(f"[email] SMTP send failed: {ex}")
        return False


def send_contact_email(name: str, email: str, subject: str, message: str,
                       business_name: Optional[str] = None, urgency: Optional[str] = None) -> bool:
    """Notify the team about a contact form submission (reply-to = submitter)."""
    if not ADMIN_NOTIFY_EMAIL:
        logger.warning("[email.contact] ADMIN_NOTIFY_EMAIL not set; skipping notification")
        return False
    label = URGENCY_LABELS.get((urgency or "normal").lower(), "Contact")
    html = render_email(
        "contact_notification.html",
        name=name,
        email=email,
        subject=subject,
        message=message,
        business_name=business_name,
        urgency=urgency or "normal",
    )
    text = f"From: {name} <{email}>\nBusiness: {business_name or '-'}\nUrgency: {urgency or 'normal'}\n\n{message}"
    return send_email_smtp(ADMIN_NOTIFY_EMAIL, f"{label} - {subject} - {name}", html, text, reply_to=email)


def send_auto_reply(name: str, email: str, subject: str) -> bool:
    html = render_email("contact_auto_reply.html", name=name, subject=subject)
    text = (
        f"Hi {name},\n\nThanks for contacting {APP_NAME}. We received your message "
        f"\"{subject}\" and will get back to you within 24 hours."
    )
    return send_email_smtp(email, f"{APP_NAME} - we received your message", html, text)


def send_order_notification(order: dict) -> bool:
    """Tell the team a paid order is ready to be worked on."""
    if not ADMIN_NOTIFY_EMAIL:
        logger.warning("[email.order] ADMIN_NOTIFY_EMAIL not set; skipping notification")
        return False
    service = "Profile Removal" if order.get("service_type") == "remove" else "Profile Reset"
    business = order.get("business_name") or "unknown business"
    html = render_email("order_notification.html", order=order, service=service)
    text = (
        f"New paid order #{order.get('id')}: {service} for {business}\n"
        f"Customer: {order.get('customer_name')} <{order.get('customer_email')}>\n"
        f"Total: {order.get('total_amount')} {order.get('currency')}"
    )
    return send_email_smtp(
        ADMIN_NOTIFY_EMAIL,
        f"New order: {service} - {business}",
        html,
        text,
        reply_to=order.get("customer_email") or None,
    )
