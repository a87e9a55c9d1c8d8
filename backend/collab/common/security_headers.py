from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from collab import settings

STATIC_SECURITY_HEADERS = {
    # Disallow embedding in frames
    'X-Frame-Options': 'DENY',
    'X-Content-Type-Options': 'nosniff',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'camera=(), geolocation=(), microphone=(), payment=(), usb=()',
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to every API response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        if settings.ENABLE_SECURITY_HEADERS:
            response.headers.update(STATIC_SECURITY_HEADERS)
            if settings.CSP_POLICY:
                response.headers['Content-Security-Policy'] = settings.CSP_POLICY
            # Only in deployed environments to avoid local https trouble
            if settings.ENABLE_HSTS:
                response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response
