# gallery/api/v1/routes/accounts.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from gallery.api.dependencies import get_access_controller, get_bearer_token, unwrap
from gallery.core.schemas.accounts import AccountCreate, AccountResponse, AccountUpdate
from gallery.services.access_controller import AccessController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=list[AccountResponse])
async def list_accounts(controller: AccessController = Depends(get_access_controller)):
    """All accounts, without their images"""
    return unwrap(await controller.list_accounts())


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    controller: AccessController = Depends(get_access_controller),
):
    return unwrap(await controller.get_account(account_id))


@router.post("/", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    account_create: AccountCreate,
    controller: AccessController = Depends(get_access_controller),
):
    logger.info(f"Registration attempt for email: {account_create.email}")
    return unwrap(
        await controller.create_account(
            account_create.name,
            account_create.email,
            account_create.password,
            account_create.category,
        )
    )


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    account_update: AccountUpdate,
    token: Optional[str] = Depends(get_bearer_token),
    controller: AccessController = Depends(get_access_controller),
):
    return unwrap(
        await controller.update_account(
            token,
            account_id,
            account_update.name,
            account_update.email,
            account_update.password,
            account_update.category,
        )
    )


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    account_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    controller: AccessController = Depends(get_access_controller),
):
    """Delete the caller's own account along with all of its images"""
    unwrap(await controller.delete_account(token, account_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
