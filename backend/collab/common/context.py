"""
Used to track global application context
User information
Request information
Used for request logging and error reporting.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict

from sentry_sdk import set_tag as set_sentry_tag
from sentry_sdk import set_user as set_sentry_user

from collab.common.enum import BaseEnum

_app_context: ContextVar[Dict[str, Any] | None] = ContextVar('_app_context', default=None)

_user_type_key = 'user'
_user_id_key = 'user_id'
_request_id_key = 'request_id'
_breadcrumb_key = 'breadcrumb'
_unknown = 'UNKNOWN'


class AppContextUserType(BaseEnum):
    UNKNOWN = _unknown  # Default but should be overridden by every entry point
    USER = 'U'  # Implies data was modified by App user
    MANUAL = 'M'  # Implies data was modified by engineer
    SYSTEM = 'S'  # Implies data was modified through scheduled system process


def reset(token: Token[Dict[str, Any] | None]) -> None:
    _app_context.reset(token)


def initialize(
    user_type: AppContextUserType = AppContextUserType.UNKNOWN,
    user_id: str | None = None,
    request_id: str | None = None,
    breadcrumb: str | None = None,
) -> Token[Dict[str, Any] | None]:
    context = {
        _user_type_key: user_type,
        _user_id_key: user_id,
        _request_id_key: request_id,
        _breadcrumb_key: breadcrumb,
    }
    return _app_context.set(context)


def _require_context() -> Dict[str, Any]:
    app_ctx = _app_context.get()
    if app_ctx is None:
        raise RuntimeError('Application context not initialized')
    return app_ctx


def set_user(user_type: AppContextUserType, user_id: str | None = None) -> None:
    app_ctx = _require_context()
    app_ctx[_user_type_key] = user_type
    app_ctx[_user_id_key] = user_id
    set_sentry_user(dict(id=user_id))


def set_request_id(request_id: str) -> None:
    app_ctx = _require_context()
    app_ctx[_request_id_key] = request_id
    set_sentry_tag('request_id', request_id)


def set_breadcrumb(breadcrumb: str) -> None:
    app_ctx = _require_context()
    app_ctx[_breadcrumb_key] = breadcrumb


def get_request_id() -> str:
    return str(_require_context()[_request_id_key])


def get_safe_request_id() -> str | None:
    """
    safely accessible at anypoint in application lifecycle
    """
    app_ctx = _app_context.get()
    if app_ctx:
        return app_ctx.get(_request_id_key)
    return None


def get_user_id() -> str:
    return str(_require_context()[_user_id_key])


def get_safe_user_id() -> str | None:
    """
    Safely accessible at anypoint in application lifecycle
    """
    app_ctx = _app_context.get()
    if app_ctx:
        return app_ctx.get(_user_id_key)
    return None


def get_user_type() -> AppContextUserType:
    return AppContextUserType(_require_context()[_user_type_key])


def get_breadcrumb() -> str | None:
    breadcrumb = _require_context()[_breadcrumb_key]
    return str(breadcrumb) if breadcrumb is not None else None
