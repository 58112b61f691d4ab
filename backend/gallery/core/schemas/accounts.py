# gallery/core/schemas/accounts.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from gallery.models.account import AccountCategory


# Field rules live in AccountValidator so the first failing check decides the message;
# the request models only describe the shape.
class AccountCreate(BaseModel):
    name: Optional[str] = Field(None, description="Display name, 2-100 characters")
    email: Optional[str] = Field(None, description="Unique email address")
    password: Optional[str] = Field(None, description="Password, 6-255 characters")
    category: str = Field(AccountCategory.LEAD.value, description="lead or customer")


class AccountUpdate(AccountCreate):
    pass


class AccountResponse(BaseModel):
    id: int
    name: str
    email: str
    category: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
