from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class WaitlistRequest(BaseModel):
    # Field rules live in utils.validation so errors name the first bad field.
    email: str | None = None
    role: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class WaitlistCreatedResponse(BaseModel):
    message: str
    id: int


class WaitlistCountResponse(BaseModel):
    count: int


class WaitlistEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: str
    first_name: str | None
    last_name: str | None
    phone: str | None
    created_at: datetime
    notified: bool


class LaunchNotificationResponse(BaseModel):
    message: str
    success: int
    errors: int
    total: int
