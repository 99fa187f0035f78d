from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tracker.core.security import Principal, principal_from_token
from tracker.core.settings import settings
from tracker.db.base import utcnow

bearer_scheme = HTTPBearer(auto_error=False)
logger = logging.getLogger("security")


def _log_auth_event(event: str, *, request: Request, extra: Optional[dict] = None) -> None:
    payload = {
        "event": event,
        "request_id": request.headers.get("x-request-id"),
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else None,
    }
    if extra:
        payload.update(extra)
    logger.info(json.dumps(payload, default=str))


def get_now() -> datetime:
    """Evaluation instant for one request; every figure in a response uses it."""
    return utcnow()


def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Principal:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or not credentials.credentials:
        _log_auth_event("token_missing", request=request)
        raise credentials_exception

    principal = principal_from_token(credentials.credentials)
    if principal is None:
        _log_auth_event("token_invalid", request=request)
        raise credentials_exception
    return principal


def can_view_everyone(principal: Principal) -> bool:
    return principal.has_any_role(settings.live_tracking_roles)


def require_live_tracking(
    request: Request,
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not can_view_everyone(principal):
        _log_auth_event(
            "live_tracking_forbidden",
            request=request,
            extra={"username": principal.username, "role": principal.role},
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Role not allowed")
    return principal
