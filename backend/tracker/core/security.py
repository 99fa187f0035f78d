from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from tracker.core.settings import settings


@dataclass(frozen=True)
class Principal:
    username: str
    role: str

    def has_any_role(self, roles) -> bool:
        return self.role.strip().lower() in {r.strip().lower() for r in roles}


def decode_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.algorithm])


def principal_from_token(token: str) -> Optional[Principal]:
    """Build a principal from a bearer token, or ``None`` when it is unusable."""
    try:
        payload = decode_token(token)
    except JWTError:
        return None
    username = str(payload.get("sub") or "").strip()
    if not username:
        return None
    role = str(payload.get("role") or "employee").strip().lower()
    return Principal(username=username, role=role)
