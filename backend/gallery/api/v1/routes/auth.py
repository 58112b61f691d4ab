# gallery/api/v1/routes/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm

from gallery.api.dependencies import get_access_controller, get_bearer_token, unwrap
from gallery.core.schemas.accounts import AccountResponse
from gallery.core.schemas.auth import Token
from gallery.services.access_controller import AccessController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    controller: AccessController = Depends(get_access_controller),
):
    """Exchange email (as username) and password for a bearer token"""
    logger.info(f"Login attempt for email: {form_data.username}")
    issued = unwrap(await controller.login(form_data.username, form_data.password))
    return Token(
        access_token=issued.access_token,
        token_type=issued.token_type,
        expires_in=issued.expires_in,
    )


@router.get("/me", response_model=AccountResponse)
async def read_current_account(
    token: Optional[str] = Depends(get_bearer_token),
    controller: AccessController = Depends(get_access_controller),
):
    return unwrap(await controller.current_account(token))
