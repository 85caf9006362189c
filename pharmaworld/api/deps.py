from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pharmaworld.core.config import Settings
from pharmaworld.core.errors import Forbidden, Unauthenticated
from pharmaworld.core.security import Err, Ok, verify_token
from pharmaworld.db.mongo import Database, get_db
from pharmaworld.models.schemas import Role

bearer = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_app_settings),
) -> Ok:
    token = credentials.credentials if credentials else None
    result = verify_token(token, settings)
    if isinstance(result, Err):
        raise Unauthenticated()
    return result


def require_role(role: Role):
    """Build a dependency that admits only users whose stored role is ``role``.

    The role is read from the user store on every request; the token only
    carries the email.
    """

    def checker(claims: Ok = Depends(get_claims), db: Database = Depends(get_db)) -> dict:
        user = db.users.find_one({"email": claims.email})
        if not user or user.get("role") != role.value:
            raise Forbidden()
        return user

    checker.__name__ = f"require_{role.value}"
    return checker


require_admin = require_role(Role.admin)
require_seller = require_role(Role.seller)


def ensure_same_email(email: str, claims: Ok):
    if email != claims.email:
        raise Forbidden("unauthorized access")
