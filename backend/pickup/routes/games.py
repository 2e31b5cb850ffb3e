import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlmodel import Session

from pickup.database import get_session
from pickup.errors import NotFoundError, PersistenceError, ValidationError
from pickup.models.game_schedule import GameSchedule
from pickup.services import schedule_form, schedule_store
from pickup.services.reminder_dispatch import list_reminder_candidates
from pickup.services.schedule_form import DEFAULT_DAY_OF_WEEK, ScheduleForm
from pickup.services.schedule_ordering import (
    describe_time_range,
    describe_when,
    game_status,
    sort_schedules,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class GameUpdate(BaseModel):
    # Emptiness is checked by ScheduleForm.validate() so the message is ours
    title: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    is_recurring: bool = True
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    game_date: Optional[date] = None
    game_time: Optional[str] = None
    end_time: Optional[str] = None


class GameCreate(GameUpdate):
    created_by: str


class GameResponse(BaseModel):
    id: str
    title: str
    location: str
    address: Optional[str]
    is_recurring: bool
    day_of_week: Optional[int]
    game_date: Optional[date]
    game_time: str
    end_time: Optional[str]
    created_by: str
    created_at: datetime
    status: str  # recurring|upcoming|past|unknown
    when: str
    time_range: str


def _to_form(data: GameUpdate) -> ScheduleForm:
    return ScheduleForm(
        title=data.title or "",
        location=data.location or "",
        address=data.address or "",
        is_recurring=data.is_recurring,
        day_of_week=data.day_of_week if data.day_of_week is not None else DEFAULT_DAY_OF_WEEK,
        game_date=data.game_date,
        game_time=data.game_time or "",
        end_time=data.end_time or "",
    )


def _to_response(game: GameSchedule, now: Optional[datetime] = None) -> GameResponse:
    return GameResponse(
        **game.model_dump(),
        status=game_status(game, now),
        when=describe_when(game),
        time_range=describe_time_range(game),
    )


def _raise_http(e: Exception, action: str):
    """Map service exceptions onto HTTP errors with a short message."""
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=422, detail=str(e)) from e
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=404, detail="Game not found") from e
    logger.error(f"Error trying to {action}: {e}")
    raise HTTPException(status_code=500, detail=f"Could not {action}. Try again.") from e


@router.get("/games", response_model=List[GameResponse])
def list_games(session: Session = Depends(get_session)):
    """All games, recurring first, then one-off games by date"""
    try:
        games = schedule_store.list_schedules(session)
    except PersistenceError as e:
        _raise_http(e, "load games")
    now = datetime.now()
    return [_to_response(g, now) for g in sort_schedules(games)]


@router.get("/games/reminder-candidates", response_model=List[GameResponse])
def list_games_for_reminders(session: Session = Depends(get_session)):
    """Dated games from today on, the only ones a reminder can be sent for"""
    try:
        games = list_reminder_candidates(session)
    except PersistenceError as e:
        _raise_http(e, "load games")
    now = datetime.now()
    return [_to_response(g, now) for g in games]


@router.get("/games/{game_id}", response_model=GameResponse)
def get_game(game_id: str, session: Session = Depends(get_session)):
    try:
        game = schedule_store.get_schedule(session, game_id)
    except (NotFoundError, PersistenceError) as e:
        _raise_http(e, "load game")
    return _to_response(game)


@router.post("/games", response_model=GameResponse, status_code=201)
def create_game(game_data: GameCreate, session: Session = Depends(get_session)):
    """Create a recurring or one-off game"""
    form = _to_form(game_data)
    try:
        game = schedule_form.create_game(session, form, game_data.created_by)
    except (ValidationError, PersistenceError) as e:
        _raise_http(e, "create game")
    return _to_response(game)


@router.put("/games/{game_id}", response_model=GameResponse)
def update_game(game_id: str, game_data: GameUpdate, session: Session = Depends(get_session)):
    """Replace every editable field of a game"""
    try:
        game = schedule_form.update_game(session, game_id, _to_form(game_data))
    except (ValidationError, NotFoundError, PersistenceError) as e:
        _raise_http(e, "update game")
    return _to_response(game)


@router.delete("/games/{game_id}", status_code=204)
def delete_game(game_id: str, session: Session = Depends(get_session)):
    """Delete a game permanently"""
    try:
        schedule_form.delete_game(session, game_id)
    except (NotFoundError, PersistenceError) as e:
        _raise_http(e, "remove game")
    return Response(status_code=204)
