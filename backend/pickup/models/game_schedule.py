"""Game schedule model: one row per pickup game, dated or weekly."""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

# 0 = Sunday, matching JavaScript's Date.getDay() used by the web client
DAYS_OF_WEEK = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


class GameSchedule(SQLModel, table=True):
    """A scheduled game.

    Recurring games carry day_of_week and no game_date; one-off games carry
    game_date and no day_of_week.
    """

    __tablename__ = "games_schedule"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str
    location: str
    address: Optional[str] = Field(default=None)
    is_recurring: bool = Field(default=False)
    day_of_week: Optional[int] = Field(default=None)  # 0-6, recurring only
    game_date: Optional[date] = Field(default=None, index=True)  # one-off only
    game_time: str  # "19:00" or "19:00:00", not format-checked
    end_time: Optional[str] = Field(default=None)
    created_by: str
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
