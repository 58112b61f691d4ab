# gallery/api/dependencies.py
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from gallery.core.config import settings
from gallery.core.database import db_helper
from gallery.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from gallery.core.outcomes import ControllerResult, Outcome
from gallery.core.security import TokenCodec
from gallery.repositories.account_repository import AccountRepository
from gallery.repositories.media_repository import MediaRepository
from gallery.services.access_controller import AccessController
from gallery.services.account_guard import AccountGuard
from gallery.services.media_guard import MediaGuard

# auto_error=False: a missing header must reach the controller and come back as AUTH_FAILED
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login", auto_error=False)


@lru_cache()
def get_token_codec() -> TokenCodec:
    """One codec per process, built from the startup configuration"""
    return TokenCodec(
        settings.security.TOKEN_SECRET_KEY,
        lifetime=settings.security.token_lifetime,
    )


async def get_access_controller(
    session: AsyncSession = Depends(db_helper.session_getter),
    codec: TokenCodec = Depends(get_token_codec),
) -> AccessController:
    return AccessController(
        codec,
        AccountGuard(AccountRepository(session)),
        MediaGuard(MediaRepository(session), settings.media),
    )


async def get_bearer_token(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    return token


_OUTCOME_ERRORS: dict[Outcome, type[AppException]] = {
    Outcome.AUTH_FAILED: AuthenticationError,
    Outcome.FORBIDDEN: AuthorizationError,
    Outcome.BAD_REQUEST: ValidationError,
    Outcome.CONFLICT: ConflictError,
    Outcome.NOT_FOUND: NotFoundError,
    Outcome.INTERNAL: DatabaseError,
}


def unwrap(result: ControllerResult):
    """Return the payload of a successful result or raise the matching AppException"""
    if result.outcome is Outcome.OK:
        return result.payload
    raise _OUTCOME_ERRORS[result.outcome](result.message)
