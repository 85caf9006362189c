from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from jose import ExpiredSignatureError, JWTError, jwt

from pharmaworld.core.config import Settings


@dataclass(frozen=True)
class Ok:
    claims: Dict[str, Any] = field(default_factory=dict)

    @property
    def email(self) -> str:
        return self.claims["email"]


@dataclass(frozen=True)
class Err:
    reason: str


TokenResult = Union[Ok, Err]


def issue_token(claims: Dict[str, Any], settings: Settings, expires_minutes: Optional[int] = None) -> str:
    to_encode = dict(claims)
    to_encode["sub"] = claims["email"]
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or settings.token_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: Optional[str], settings: Settings) -> TokenResult:
    if not token:
        return Err("missing token")
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        return Err("token expired")
    except JWTError:
        return Err("invalid token")

    email = payload.get("email") or payload.get("sub")
    if not email:
        return Err("token has no email claim")
    payload["email"] = email
    return Ok(payload)
