"""
Display order and status for the game list.

Order:
1. Recurring games first, by day_of_week (Sunday=0 .. Saturday=6)
2. One-off games after, chronologically by (game_date, game_time)

One-off games with no game_date can't be placed in time; they keep the slot
they came in with and the dated games are sorted around them.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from pickup.models.game_schedule import DAYS_OF_WEEK
from pickup.utils.game_time import combine_game_datetime

STATUS_RECURRING = "recurring"
STATUS_UPCOMING = "upcoming"
STATUS_PAST = "past"
STATUS_UNKNOWN = "unknown"


def sort_schedules(games: Iterable) -> List:
    """Return a new list of games in display order. Input is not modified."""
    games = list(games)

    recurring = [g for g in games if g.is_recurring]
    recurring.sort(key=lambda g: g.day_of_week or 0)

    one_off = [g for g in games if not g.is_recurring]
    dated = sorted(
        (g for g in one_off if g.game_date is not None),
        key=lambda g: combine_game_datetime(g.game_date, g.game_time),
    )
    dated_iter = iter(dated)
    ordered_one_off = [g if g.game_date is None else next(dated_iter) for g in one_off]

    return recurring + ordered_one_off


def is_game_upcoming(game, now: Optional[datetime] = None) -> bool:
    """Recurring games are always upcoming; dated ones until their start time."""
    if game.is_recurring:
        return True
    starts_at = combine_game_datetime(game.game_date, game.game_time)
    if starts_at is None:
        return False
    return starts_at > (now or datetime.now())


def game_status(game, now: Optional[datetime] = None) -> str:
    if game.is_recurring:
        return STATUS_RECURRING
    if game.game_date is None:
        return STATUS_UNKNOWN
    return STATUS_UPCOMING if is_game_upcoming(game, now) else STATUS_PAST


def describe_when(game) -> str:
    """'Every Monday', 'Monday, 10/03/2025' or 'Date not set'."""
    if game.is_recurring and game.day_of_week in range(7):
        return f"Every {DAYS_OF_WEEK[game.day_of_week]}"
    if game.game_date is not None:
        weekday = DAYS_OF_WEEK[(game.game_date.weekday() + 1) % 7]
        return f"{weekday}, {game.game_date.strftime('%d/%m/%Y')}"
    return "Date not set"


def describe_time_range(game) -> str:
    if game.end_time:
        return f"{game.game_time} - {game.end_time}"
    return game.game_time
