"""Database access for game schedules and player contacts.

Every function takes an open Session. SQLAlchemy errors are rolled back and
re-raised as PersistenceError so callers only deal with the service
exception hierarchy.
"""

import logging
from datetime import date
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from pickup.errors import NotFoundError, PersistenceError
from pickup.models.game_schedule import GameSchedule
from pickup.models.profile import Profile

logger = logging.getLogger(__name__)


def _fail(session: Session, action: str, exc: Exception) -> PersistenceError:
    session.rollback()
    logger.error(f"Failed to {action}: {exc}")
    return PersistenceError(f"Could not {action}")


def create_schedule(session: Session, fields: Dict[str, Any]) -> GameSchedule:
    """Insert one game schedule row and return it with id/created_at set."""
    try:
        game = GameSchedule(**fields)
        session.add(game)
        session.commit()
        session.refresh(game)
    except SQLAlchemyError as e:
        raise _fail(session, "create game schedule", e) from e
    return game


def list_schedules(session: Session) -> List[GameSchedule]:
    try:
        return list(session.exec(select(GameSchedule)).all())
    except SQLAlchemyError as e:
        raise _fail(session, "load game schedules", e) from e


def get_schedule(session: Session, game_id: str) -> GameSchedule:
    try:
        game = session.get(GameSchedule, game_id)
    except SQLAlchemyError as e:
        raise _fail(session, f"load game {game_id}", e) from e
    if game is None:
        raise NotFoundError(f"Game {game_id} not found")
    return game


def list_upcoming_dated(session: Session, today: date) -> List[GameSchedule]:
    """Games with a game_date on or after today, earliest first.

    Recurring games have no game_date and are never returned.
    """
    query = (
        select(GameSchedule)
        .where(GameSchedule.game_date >= today)  # type: ignore
        .order_by(GameSchedule.game_date)  # type: ignore
    )
    try:
        return list(session.exec(query).all())
    except SQLAlchemyError as e:
        raise _fail(session, "load upcoming games", e) from e


def update_schedule(session: Session, game_id: str, fields: Dict[str, Any]) -> GameSchedule:
    """Overwrite every given field on an existing game."""
    game = get_schedule(session, game_id)
    for key, value in fields.items():
        setattr(game, key, value)
    try:
        session.add(game)
        session.commit()
        session.refresh(game)
    except SQLAlchemyError as e:
        raise _fail(session, f"update game {game_id}", e) from e
    return game


def delete_schedule(session: Session, game_id: str) -> None:
    game = get_schedule(session, game_id)
    try:
        session.delete(game)
        session.commit()
    except SQLAlchemyError as e:
        raise _fail(session, f"delete game {game_id}", e) from e


def list_contacts_with_phone(session: Session) -> List[Profile]:
    """Profiles whose phone column is not NULL (blank strings included)."""
    query = select(Profile).where(Profile.phone.is_not(None))  # type: ignore
    try:
        return list(session.exec(query).all())
    except SQLAlchemyError as e:
        raise _fail(session, "load contacts", e) from e
