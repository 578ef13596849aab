"""
Input sanitisation, security headers and request rate limiting.
"""

from __future__ import annotations

import re

from fastapi import Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import Response

from folio.logging_utils import log_security_event
from shared.constants import MAX_SANITIZED_LENGTH

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")

_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)

CSP_POLICY = {
    "default-src": ["'self'"],
    "script-src": ["'self'", "'unsafe-inline'", "https://www.gstatic.com"],
    "style-src": ["'self'", "'unsafe-inline'", "https://fonts.googleapis.com"],
    "img-src": [
        "'self'",
        "data:",
        "blob:",
        "https://placehold.co",
        "https://github.com",
        "https://raw.githubusercontent.com",
        "https://firebasestorage.googleapis.com",
        "https://storage.googleapis.com",
        "https://*.googleusercontent.com",
        "https://images.unsplash.com",
    ],
    "font-src": ["'self'", "data:", "https://fonts.gstatic.com"],
    "connect-src": ["'self'"],
    "object-src": ["'none'"],
    "base-uri": ["'self'"],
    "form-action": ["'self'"],
    "frame-ancestors": ["'none'"],
    "upgrade-insecure-requests": [],
}


def build_csp_header(policy: dict = CSP_POLICY) -> str:
    return "; ".join(
        f"{directive} {' '.join(sources)}" if sources else directive
        for directive, sources in policy.items()
    )


SECURITY_HEADERS = {
    "X-DNS-Prefetch-Control": "on",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(), interest-cohort=()",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "Cross-Origin-Opener-Policy": "same-origin-allow-popups",
    "Content-Security-Policy": build_csp_header(),
}


def apply_security_headers(response: Response) -> Response:
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


def sanitize_input(value) -> str:
    """Trims and strips markup-ish fragments from free text."""
    if not isinstance(value, str):
        return ""
    cleaned = value.strip()
    cleaned = cleaned.replace("<", "").replace(">", "")
    cleaned = _JS_PROTOCOL.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    return cleaned[:MAX_SANITIZED_LENGTH]


def validate_email(email: str) -> bool:
    candidate = sanitize_input(email)
    if len(candidate) > 254:
        return False
    if ".." in candidate or candidate.startswith(".") or candidate.endswith("."):
        return False
    return bool(EMAIL_PATTERN.match(candidate))


def validate_phone(phone: str):
    """Returns the sanitised phone number, or None when it is not valid."""
    candidate = sanitize_input(phone)
    if not PHONE_PATTERN.match(candidate):
        return None
    return candidate


limiter = Limiter(key_func=get_remote_address)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    log_security_event(
        "RATE_LIMIT_EXCEEDED",
        path=request.url.path,
        client=get_remote_address(request),
        limit=str(exc.detail),
    )
    return _rate_limit_exceeded_handler(request, exc)
