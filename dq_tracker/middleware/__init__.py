"""HTTP middleware: per-IP rate limiting and security headers."""

from dq_tracker.middleware.rate_limit import RateLimitMiddleware, SlidingWindowLimiter
from dq_tracker.middleware.security_headers import SecurityHeadersMiddleware

__all__ = ["RateLimitMiddleware", "SlidingWindowLimiter", "SecurityHeadersMiddleware"]
