import hmac
import json
import logging
from typing import Optional

from fastapi import Header, Request

from . import config
from .errors import Unauthorized

logger = logging.getLogger(__name__)


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """Exact string equality, compared in constant time"""
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


async def _password_from_body(request: Request) -> Optional[str]:
    """Read a ``password`` field from a JSON body, if there is one"""
    body = await request.body()
    if not body:
        return None
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(payload, dict):
        value = payload.get("password")
        return value if isinstance(value, str) else None
    return None


async def require_admin(
    request: Request,
    x_admin_password: Optional[str] = Header(None),
) -> None:
    """
    Shared-password gate for admin routes.
    The X-Admin-Password header wins over a ``password`` body field.
    """
    provided = x_admin_password or await _password_from_body(request)

    if not constant_time_compare(provided, config.ADMIN_PASSWORD):
        logger.warning(f"🚫 Admin authentication failed for {request.method} {request.url.path}")
        raise Unauthorized()
