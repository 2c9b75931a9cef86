"""Dependency injection for FastAPI."""

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from numbers_lottery.config import Settings
from numbers_lottery.errors import AdminRequiredError, AuthenticationRequiredError
from numbers_lottery.services.access_policy import AccessPolicy, Identity
from numbers_lottery.services.lottery_service import LotteryLedger

auth_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_ledger(request: Request) -> LotteryLedger:
    return request.app.state.ledger


def get_policy(request: Request) -> AccessPolicy:
    return request.app.state.policy


def decode_identity(token: str, settings: Settings) -> Identity:
    """Turn a verified bearer token into the caller identity."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationRequiredError("Token expired")
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected bearer token: {}", e)
        raise AuthenticationRequiredError("Invalid token")

    user_id = claims.get("sub") or claims.get("id")
    if not user_id:
        raise AuthenticationRequiredError("Token carries no user id")
    return Identity(id=str(user_id), role=claims.get("role"), email=claims.get("email"))


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
    settings: Settings = Depends(get_settings),
) -> Identity:
    """Authenticated caller; 401 without a valid bearer token."""
    if credentials is None:
        raise AuthenticationRequiredError()
    return decode_identity(credentials.credentials, settings)


async def require_admin(
    identity: Identity = Depends(get_identity),
    policy: AccessPolicy = Depends(get_policy),
) -> Identity:
    """Short-circuit non-admins before any ledger work."""
    if not policy.is_admin(identity):
        raise AdminRequiredError()
    return identity
