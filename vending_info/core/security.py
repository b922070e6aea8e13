"""
Security utilities for the Vending Machine Info API

This module provides password hashing, session token generation, error
message sanitization and the security headers middleware.
"""

import logging
import re
import secrets
from typing import Optional

import bcrypt
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from vending_info.core.config import settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72

SESSION_TOKEN_BYTES = 32


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a password with bcrypt.

    A fresh salt is generated on every call and embedded in the result, so
    hashing the same password twice yields two different strings.

    Args:
        password: The plaintext password
        rounds: bcrypt cost factor (defaults to settings.BCRYPT_ROUNDS)

    Returns:
        The bcrypt hash as a string

    Raises:
        ValueError: If the password is empty or longer than 72 bytes
    """
    if not password:
        raise ValueError("Password cannot be empty")

    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(
            f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes long"
        )

    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(encoded, salt).decode("utf-8")


def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    """
    Check a plaintext password against a stored bcrypt hash.

    Returns False for any mismatch, including missing or malformed hashes.
    """
    if not password or not hashed_password:
        return False

    try:
        return bcrypt.checkpw(
            password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError as e:
        logger.debug(f"Password verification failed on malformed input: {e}")
        return False


def generate_session_token() -> str:
    """Generate an opaque session token with 256 bits of entropy."""
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def sanitize_error_message(error_msg: str) -> str:
    """
    Sanitize error messages to prevent sensitive data leakage.

    Args:
        error_msg: The raw error message to sanitize

    Returns:
        A sanitized error message safe for API responses
    """
    if not error_msg:
        return "Unknown error occurred"

    sanitized = str(error_msg)

    sensitive_patterns = [
        # Connection strings with credentials
        (r'(\w+://)[^:/\s]+:[^@\s]+@', r'\1****:****@'),
        # Session tokens and other long hex secrets
        (r'\b[a-fA-F0-9]{32,}\b', '****'),
        # bcrypt hashes
        (r'\$2[aby]?\$\d{2}\$[./A-Za-z0-9]{53}', '****'),
        (r'password[\'"\s]*[:=][\'"\s]*[^\s\'",)]+', 'password=****'),
        (r'token[\'"\s]*[:=][\'"\s]*[^\s\'",)]+', 'token=****'),
    ]

    for pattern, replacement in sensitive_patterns:
        sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

    # Truncate very long error messages
    if len(sanitized) > 200:
        sanitized = sanitized[:200] + "..."

    return sanitized


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to every response.

    The API only serves JSON and uploaded media, so the CSP is locked down
    to same-origin resources.
    """

    security_headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Content-Security-Policy": (
            "default-src 'self'; "
            "img-src 'self' data:; "
            "media-src 'self'; "
            "frame-ancestors 'none'; "
            "base-uri 'self'"
        ),
    }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        for header_name, header_value in self.security_headers.items():
            response.headers.setdefault(header_name, header_value)

        # The interactive docs load their assets from a CDN
        if request.url.path in ("/docs", "/redoc"):
            del response.headers["Content-Security-Policy"]

        return response
