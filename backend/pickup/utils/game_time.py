"""
Parsing and display helpers for game dates and times.

Times arrive from the web form as "HH:MM" or "HH:MM:SS" strings and are stored
as-is, so everything that needs to compare them goes through parse_game_time().
"""
from datetime import date, datetime, time
from typing import Optional

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def parse_game_time(value: Optional[str]) -> Optional[time]:
    """
    Parse "19:00" / "19:00:00" into a time.

    - None or "" -> None
    - Anything time.fromisoformat() rejects -> None
    """
    if not value or not value.strip():
        return None
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        return None


def combine_game_datetime(game_date: Optional[date], game_time: Optional[str]) -> Optional[datetime]:
    """Naive local datetime for a dated game. Unparseable time counts as midnight."""
    if game_date is None:
        return None
    return datetime.combine(game_date, parse_game_time(game_time) or time.min)


def format_reminder_date(d: date) -> str:
    """March 10, 2025"""
    return f"{MONTH_NAMES[d.month - 1]} {d.day}, {d.year}"
