from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.types import ASGIApp

from collab.network.database.session import SessionManager, db


class HTTPSessionManagerMiddleware(BaseHTTPMiddleware):
    """
    One session per request, committed when the request succeeds
    """

    def __init__(
        self,
        app: ASGIApp,
        commit_on_success: bool = True,
    ):
        super().__init__(app)
        self.commit_on_success = commit_on_success

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        session_manager = SessionManager(commit_on_success=self.commit_on_success)
        with session_manager:
            response = await call_next(request)
            # Error responses never persist partial work, unless the session
            # belongs to an outer scope (tests, shell) that decides for itself
            if response.status_code >= 400 and session_manager.session_token:
                db.session.rollback()

        return response
