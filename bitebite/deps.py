# bitebite/deps.py
from __future__ import annotations

import hmac
import logging

from fastapi import Header, HTTPException, Request, status

from bitebite.core import config
from bitebite.core.database import SessionLocal
from bitebite.services.cart import CartSessions
from bitebite.services.kv_store import SqlKeyValueStore

logger = logging.getLogger(__name__)


def require_admin_token(
    request: Request,
    x_admin_token: str | None = Header(default=None),
) -> None:
    """Stub guard for the staff surface (order board, catalog maintenance).

    Without ADMIN_API_TOKEN the guard is open outside production.
    """
    configured = (config.ADMIN_API_TOKEN or "").strip()
    incoming = (x_admin_token or "").strip()
    if not configured:
        if config.IS_PROD:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Admin endpoints require ADMIN_API_TOKEN in production",
            )
        return

    if not hmac.compare_digest(incoming, configured):
        logger.warning("Access denied: invalid admin token endpoint=%s %s", request.method, request.url.path)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin token")


def get_cart_sessions(request: Request) -> CartSessions:
    sessions = getattr(request.app.state, "cart_sessions", None)
    if sessions is None:
        sessions = CartSessions(SqlKeyValueStore(SessionLocal))
        request.app.state.cart_sessions = sessions
    return sessions
