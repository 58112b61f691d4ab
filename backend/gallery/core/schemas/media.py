# gallery/core/schemas/media.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaResponse(BaseModel):
    id: int
    title: str
    filename: Optional[str] = None
    payload: str = Field(..., description="Base64 encoded image data")
    created_at: datetime
    owner_id: int

    model_config = ConfigDict(from_attributes=True)


class ResetResponse(BaseModel):
    message: str = "Database reset successfully"
    deleted_count: int
