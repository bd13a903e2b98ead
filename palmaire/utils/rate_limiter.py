"""
Rate Limiter Configuration

Uses Redis storage when REDIS_URL is set (multiple instances),
in-memory storage otherwise.
"""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from ..config import settings

logger = logging.getLogger(__name__)


def get_real_client_ip(request: Request) -> str:
    """Get real client IP behind a reverse proxy"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First entry is the original client
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    storage_uri = settings.redis_url or "memory://"
    if settings.redis_url:
        logger.info("Using Redis rate limiter storage")
    else:
        logger.info("Using in-memory rate limiter storage")

    return Limiter(
        key_func=get_real_client_ip,
        storage_uri=storage_uri,
        default_limits=["100/minute"],
        enabled=settings.rate_limit_enabled,
    )


# Global rate limiter instance
limiter = create_limiter()


# ================================
# RATE LIMIT CONFIGURATIONS
# ================================

RATE_LIMITS = {
    # Checkout flow
    "hold_create": "20/minute",
    "booking_create": "10/minute",
    "payment_intent": "20/minute",

    # Lead capture
    "contact": "5/minute",

    # Provider callbacks
    "webhook": "100/minute",
}


def get_rate_limit(operation: str) -> str:
    """Get rate limit for a specific operation."""
    return RATE_LIMITS.get(operation, "100/minute")
