from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from users_api.core.config import Settings
from users_api.core.database import get_db
from users_api.core.exceptions import AuthRejected, InvalidCredentials
from users_api.core.security import CredentialService
from users_api.services.auth_service import AuthService
from users_api.services.user_service import UserService

# Bearer scheme - extracts the token from the Authorization header
# auto_error=False so a missing header reaches our own rejection
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_user_service(
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service)
) -> UserService:
    return UserService(db, credentials)


def get_auth_service(
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service)
) -> AuthService:
    return AuthService(db, credentials)


async def get_current_claims(
    request: Request,
    bearer: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    credentials: CredentialService = Depends(get_credential_service)
) -> dict:
    """
    Access guard for protected routes.

    Rejects requests without a bearer token (401), and with an invalid or
    expired one or a non-Bearer authorization scheme (403). Valid claims
    ({id, name, exp}) are attached to request.state.user. Never touches
    the database.
    """
    if bearer is None or not bearer.credentials:
        # HTTPBearer drops headers with another scheme, e.g. "Token abc"
        header = request.headers.get("Authorization", "").strip()
        if header and header.split()[0].lower() != "bearer":
            raise InvalidCredentials("Invalid authorization scheme.")
        raise AuthRejected("Access denied. No token provided.")

    claims = credentials.decode_access_token(bearer.credentials)
    request.state.user = claims
    return claims


async def guard_user_routes(
    request: Request,
    settings: Settings = Depends(get_settings),
    bearer: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    credentials: CredentialService = Depends(get_credential_service)
) -> dict | None:
    """Apply the access guard to user routes unless PROTECT_USER_ROUTES is off"""
    if not settings.PROTECT_USER_ROUTES:
        return None
    return await get_current_claims(request, bearer, credentials)
