"""Registered player profile. Only the phone number matters for reminders."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str
    phone: Optional[str] = Field(default=None)  # free-form, e.g. "+55 (11) 99999-9999"
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
