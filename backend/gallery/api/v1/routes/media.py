# gallery/api/v1/routes/media.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from gallery.api.dependencies import get_access_controller, get_bearer_token, unwrap
from gallery.core.config import settings
from gallery.core.schemas.media import MediaResponse, ResetResponse
from gallery.services.access_controller import AccessController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/", response_model=list[MediaResponse])
async def list_media(
    user_id: Optional[int] = None,
    controller: AccessController = Depends(get_access_controller),
):
    """All images, or only those of ``user_id``, newest first"""
    return unwrap(await controller.list_media(user_id))


# Declared before /{item_id} so "reset-db" is not parsed as an id
@router.delete("/reset-db", response_model=ResetResponse)
async def reset_media(
    token: Optional[str] = Depends(get_bearer_token),
    controller: AccessController = Depends(get_access_controller),
):
    deleted_count = unwrap(await controller.reset_media(token))
    return ResetResponse(deleted_count=deleted_count)


@router.get("/{item_id}", response_model=MediaResponse)
async def get_media(
    item_id: int,
    controller: AccessController = Depends(get_access_controller),
):
    return unwrap(await controller.get_media(item_id))


@router.post("/upload", response_model=MediaResponse, status_code=status.HTTP_201_CREATED)
async def upload_media(
    title: Optional[str] = Form(None),
    image_file: Optional[UploadFile] = File(None),
    token: Optional[str] = Depends(get_bearer_token),
    controller: AccessController = Depends(get_access_controller),
):
    # One byte past the ceiling is enough for the size check to reject it
    read_limit = settings.media.MAX_FILE_SIZE_BYTES + 1
    payload = await image_file.read(read_limit) if image_file is not None else None
    filename = image_file.filename if image_file is not None else None
    return unwrap(await controller.upload_media(token, title, filename, payload))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_media(
    item_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    controller: AccessController = Depends(get_access_controller),
):
    """Delete an image owned by the caller"""
    unwrap(await controller.delete_media(token, item_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
