from fastapi import APIRouter, Depends
from typing import Optional
from pydantic import BaseModel
from users_api.api.dependencies import get_auth_service, get_current_claims
from users_api.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    name: Optional[str] = None
    password: Optional[str] = None


class TokenEnvelope(BaseModel):
    message: str
    status: int
    token: str


class ClaimsEnvelope(BaseModel):
    message: str
    status: int
    user: dict


@router.post("/login", response_model=TokenEnvelope)
def login(credentials: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Login with name and password and get a bearer token"""
    token = service.login(credentials.name, credentials.password)
    return TokenEnvelope(message="Authentication successful.", status=200, token=token)


@router.get("/me", response_model=ClaimsEnvelope)
async def get_current_user_info(claims: dict = Depends(get_current_claims)):
    """Echo the claims of the presented token"""
    return ClaimsEnvelope(
        message="Access granted to protected route.", status=200, user=claims)
