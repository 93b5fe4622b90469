import os
import logging
from dotenv import load_dotenv

# Load .env from project root
try:
    load_dotenv(dotenv_path=os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".env")))
except Exception:
    try:
        load_dotenv()
    except Exception:
        pass

# Environment
ENVIRONMENT = (os.getenv("ENVIRONMENT") or os.getenv("NODE_ENV") or "development").strip().lower()
IS_PRODUCTION = ENVIRONMENT == "production"

# Public site origin used for checkout redirects and email links
SITE_URL = (os.getenv("SITE_URL") or os.getenv("NEXT_PUBLIC_DOMAIN") or "http://localhost:8000").strip().rstrip("/")

# Google Places
GOOGLE_PLACES_API_KEY = os.getenv("GOOGLE_PLACES_API_KEY", "").strip()
PLACES_API_BASE = os.getenv("PLACES_API_BASE", "https://maps.googleapis.com/maps/api/place").strip().rstrip("/")
PLACES_HTTP_TIMEOUT = float(os.getenv("PLACES_HTTP_TIMEOUT", "10"))

# Payments (Stripe)
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "").strip()
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "").strip()
CURRENCY = (os.getenv("CURRENCY", "usd") or "usd").strip().lower()

# Admin credentials (single configured pair)
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")

# Throttling
ADMIN_LOGIN_RATE_LIMIT = int(os.getenv("ADMIN_LOGIN_RATE_LIMIT", "10"))  # attempts per IP per 15 minutes
CONTACT_RATE_LIMIT = int(os.getenv("CONTACT_RATE_LIMIT", "5"))  # submissions per IP per hour

# Mail
MAIL_FROM = os.getenv("MAIL_FROM") or os.getenv("SMTP_FROM") or "MapWipers <no-reply@mapwipers.com>"
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
ADMIN_NOTIFY_EMAIL = (os.getenv("ADMIN_NOTIFY_EMAIL") or ADMIN_EMAIL or "").strip()

# CORS
_default_origins = ",".join([
    "https://mapwipers.com",
    "https://www.mapwipers.com",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
])
ALLOWED_ORIGINS = [o.strip() for o in (os.getenv("ALLOWED_ORIGINS") or _default_origins).split(",") if o.strip()]

# Logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger("mapwipers")

# Static/template dir helpers
STATIC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "static"))
TEMPLATES_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "templates"))
