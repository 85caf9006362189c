from fastapi import APIRouter, Depends

from pharmaworld.api.deps import get_app_settings
from pharmaworld.core.config import Settings
from pharmaworld.core.security import issue_token
from pharmaworld.models.schemas import Token, TokenRequest

router = APIRouter()


@router.post("/jwt", response_model=Token)
def create_jwt(body: TokenRequest, settings: Settings = Depends(get_app_settings)):
    """Sign the submitted identity (at least an email) into a one hour token."""
    claims = body.model_dump(exclude={"exp", "sub"})
    return {"token": issue_token(claims, settings)}
