"""Rate limiting utilities using throttled-py"""
import os
from datetime import timedelta
from throttled import Throttled, RateLimiterType, store, rate_limiter

from core.config import logger, ADMIN_LOGIN_RATE_LIMIT, CONTACT_RATE_LIMIT

# Initialize storage - Redis for production, MemoryStore for development
_storage_type = "memory"
try:
    redis_url = os.getenv("REDIS_URL", "").strip()
    if redis_url:
        # RedisStore expects the URL string, not a Redis client object
        storage = store.RedisStore(server=redis_url)
        _storage_type = "redis"
        logger.info("[rate_limit] Using Redis for rate limiting")
    else:
        storage = store.MemoryStore()
        logger.warning("[rate_limit] REDIS_URL not set - using in-memory storage (not suitable for production with multiple workers)")
except Exception as ex:
    storage = store.MemoryStore()
    logger.warning(f"[rate_limit] Redis connection failed, using in-memory storage: {ex}")

# Admin login limiter: attempts per IP per 15 minutes (brute force protection)
login_throttle = Throttled(
    using=RateLimiterType.FIXED_WINDOW.value,
    quota=rate_limiter.per_duration(timedelta(minutes=15), limit=ADMIN_LOGIN_RATE_LIMIT),
    store=storage,
)

# Contact form limiter: submissions per IP per hour
contact_throttle = Throttled(
    using=RateLimiterType.FIXED_WINDOW.value,
    quota=rate_limiter.per_duration(timedelta(hours=1), limit=CONTACT_RATE_LIMIT),
    store=storage,
)


def _check(throttle: Throttled, key: str, label: str) -> bool:
    try:
        return not throttle.limit(key, cost=1).limited
    except Exception as ex:
        logger.warning(f"[rate_limit] {label} rate limit check failed: {ex}")
        # Fail open
        return True


def check_login_rate_limit(ip: str) -> bool:
    """True when another admin login attempt from this IP is allowed."""
    return _check(login_throttle, f"admin_login:{ip}", "Admin login")


def check_contact_rate_limit(ip: str) -> bool:
    return _check(contact_throttle, f"contact:{ip}", "Contact")
