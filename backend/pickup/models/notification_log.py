"""Notification log model for tracking sent WhatsApp messages."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel

NOTIFICATION_TYPES = ("booking", "system_open", "game_reminder")


class NotificationLog(SQLModel, table=True):
    """Log of every message Green API accepted."""

    __tablename__ = "notification_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    target: str  # "5511999999999@c.us" or "GROUP:120363...@g.us"
    message: str  # The actual message text sent
    type: str = Field(index=True)  # booking|system_open|game_reminder
    status: str = Field(default="sent")
    gateway_response: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSON)
    )
    sent_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
