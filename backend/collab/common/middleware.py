from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request

from collab.common import context


class HTTPAppContextMiddleware(BaseHTTPMiddleware):
    """
    Every request gets a fresh application context, the auth guard
    fills in the user once the bearer token is verified
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        token = context.initialize(
            user_type=context.AppContextUserType.UNKNOWN,
            breadcrumb=f'{request.method} {request.url.path}',
        )
        try:
            return await call_next(request)
        finally:
            context.reset(token)
