"""
Create / edit / delete flow for game schedules.

ScheduleForm holds what the admin is currently typing. It is a plain value
object: an edit session starts from ScheduleForm.from_record(), a cancelled
session is simply dropped, and nothing is persisted until create_game() or
update_game() succeeds.

Recurring and one-off games use different fields:
- recurring: day_of_week is kept, game_date is forced to None
- one-off:   game_date is kept, day_of_week is forced to None
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from sqlmodel import Session

from pickup.errors import ValidationError
from pickup.models.game_schedule import GameSchedule
from pickup.services import schedule_store

logger = logging.getLogger(__name__)

DEFAULT_DAY_OF_WEEK = 1  # Monday


@dataclass
class ScheduleForm:
    title: str = ""
    location: str = ""
    address: str = ""
    is_recurring: bool = True
    day_of_week: int = DEFAULT_DAY_OF_WEEK
    game_date: Optional[date] = None
    game_time: str = ""
    end_time: str = ""

    @classmethod
    def from_record(cls, game: GameSchedule) -> "ScheduleForm":
        """Open an edit session pre-filled from an existing game."""
        return cls(
            title=game.title,
            location=game.location,
            address=game.address or "",
            is_recurring=bool(game.is_recurring),
            day_of_week=game.day_of_week if game.day_of_week is not None else DEFAULT_DAY_OF_WEEK,
            game_date=game.game_date,
            game_time=game.game_time,
            end_time=game.end_time or "",
        )

    def reset(self) -> None:
        """Blank the form after a successful create. is_recurring is kept."""
        self.title = ""
        self.location = ""
        self.address = ""
        self.day_of_week = DEFAULT_DAY_OF_WEEK
        self.game_date = None
        self.game_time = ""
        self.end_time = ""

    def validate(self) -> None:
        missing = [
            name
            for name in ("title", "location", "game_time")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise ValidationError(f"Required fields missing: {', '.join(missing)}")

    def to_fields(self) -> Dict[str, Any]:
        """Column values for the store, with the recurring/one-off rule applied."""
        return {
            "title": self.title,
            "location": self.location,
            "address": self.address or None,
            "is_recurring": self.is_recurring,
            "day_of_week": self.day_of_week if self.is_recurring else None,
            "game_date": None if self.is_recurring else self.game_date,
            "game_time": self.game_time,
            "end_time": self.end_time or None,
        }


def create_game(session: Session, form: ScheduleForm, user_id: str) -> GameSchedule:
    """
    Validate and insert a new game, then blank the form.

    Raises:
        ValidationError: title, location or game_time empty, or no acting user
        PersistenceError: the insert failed (form is left as typed)
    """
    form.validate()
    if not user_id:
        raise ValidationError("A signed-in user is required to create games")

    fields = form.to_fields()
    fields["created_by"] = user_id
    game = schedule_store.create_schedule(session, fields)
    logger.info(f"Game {game.id} created by {user_id} (recurring={game.is_recurring})")

    form.reset()
    return game


def update_game(session: Session, game_id: str, form: ScheduleForm) -> GameSchedule:
    """
    Overwrite every editable field of an existing game.

    Raises:
        ValidationError: title, location or game_time empty
        NotFoundError: no game with this id
        PersistenceError: the update failed
    """
    form.validate()
    game = schedule_store.update_schedule(session, game_id, form.to_fields())
    logger.info(f"Game {game_id} updated")
    return game


def delete_game(session: Session, game_id: str) -> None:
    """Delete immediately. Callers confirm with the user before calling this."""
    schedule_store.delete_schedule(session, game_id)
    logger.info(f"Game {game_id} deleted")


def cancel_edit() -> ScheduleForm:
    """Drop the edit session. The caller discards its form and uses this blank one."""
    return ScheduleForm()
