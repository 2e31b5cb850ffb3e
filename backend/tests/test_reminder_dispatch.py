"""Tests for game reminder dispatch (group and broadcast)."""

from datetime import date

import pytest
from sqlmodel import Session, select

from pickup.errors import DispatchError, NoRecipientsError, NotFoundError, SelectionError
from pickup.models.game_schedule import GameSchedule
from pickup.models.notification_log import NotificationLog
from pickup.models.profile import Profile
from pickup.services.greenapi_service import GreenApiCredentials, GreenApiService
from pickup.services.notification_templates import render_template
from pickup.services.reminder_dispatch import (
    build_reminder_message,
    dispatch_reminders,
    list_reminder_candidates,
)
from tests.conftest import FakeHttp, FakeResponse

TODAY = date(2025, 3, 1)


@pytest.fixture
def games(session: Session):
    """One dated game in the future, one in the past, one weekly game."""
    final = GameSchedule(
        title="Cup final",
        location="Arena Norte",
        is_recurring=False,
        game_date=date(2025, 3, 10),
        game_time="19:30",
        created_by="admin",
    )
    old = GameSchedule(
        title="Friendly",
        location="Arena Sul",
        is_recurring=False,
        game_date=date(2025, 2, 1),
        game_time="10:00",
        created_by="admin",
    )
    weekly = GameSchedule(
        title="Monday pickup",
        location="Arena Norte",
        is_recurring=True,
        day_of_week=1,
        game_time="20:00",
        created_by="admin",
    )
    for g in (final, old, weekly):
        session.add(g)
    session.commit()
    for g in (final, old, weekly):
        session.refresh(g)
    return final, old, weekly


def _add_profiles(session: Session, *phones):
    for i, phone in enumerate(phones):
        session.add(Profile(name=f"Player {i}", phone=phone))
    session.commit()


def _gateway(session: Session, http: FakeHttp) -> GreenApiService:
    return GreenApiService(session, http=http)


# ---------------------------------------------------------------------------
# Candidates and message
# ---------------------------------------------------------------------------


def test_candidates_are_dated_games_from_today(session: Session, games):
    final, old, weekly = games
    later = GameSchedule(
        title="Semi",
        location="Arena",
        game_date=TODAY,
        game_time="09:00",
        created_by="admin",
    )
    session.add(later)
    session.commit()

    assert [g.title for g in list_reminder_candidates(session, TODAY)] == ["Semi", "Cup final"]


def test_reminder_message(session: Session, games):
    final, _, _ = games
    message = build_reminder_message(final)
    assert "Cup final" in message
    assert "March 10, 2025" in message
    assert "19:30" in message
    assert "Arena Norte" in message
    assert "{" not in message


def test_render_template_blanks_missing_values():
    assert render_template("{title} at {location}", title="Final", location=None) == "Final at "


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("game_id", [None, "", "  "])
def test_no_game_selected(session: Session, game_id):
    with pytest.raises(SelectionError):
        dispatch_reminders(session, game_id, today=TODAY)


def test_unknown_game(session: Session, games, green_api_env):
    http = FakeHttp()
    with pytest.raises(NotFoundError):
        dispatch_reminders(session, "nope", gateway=_gateway(session, http), today=TODAY)
    assert http.calls == []


def test_past_game_not_selectable(session: Session, games, green_api_env):
    _, old, _ = games
    with pytest.raises(NotFoundError):
        dispatch_reminders(session, old.id, group_destination="120363@g.us", today=TODAY)


def test_recurring_game_not_selectable(session: Session, games, green_api_env):
    _, _, weekly = games
    with pytest.raises(NotFoundError):
        dispatch_reminders(session, weekly.id, group_destination="120363@g.us", today=TODAY)


# ---------------------------------------------------------------------------
# Group mode
# ---------------------------------------------------------------------------


def test_group_mode_sends_exactly_once_without_contacts(session: Session, games, green_api_env):
    final, _, _ = games
    http = FakeHttp()

    result = dispatch_reminders(
        session,
        final.id,
        group_destination="  120363@g.us ",
        gateway=_gateway(session, http),
        today=TODAY,
    )

    assert result.mode == "group"
    assert result.sent == 1
    assert result.message == "Reminder sent to group"
    assert result.warnings == []
    assert len(http.calls) == 1
    assert http.calls[0]["json"]["chatId"] == "120363@g.us"


def test_group_mode_ignores_contacts(session: Session, games, green_api_env):
    final, _, _ = games
    _add_profiles(session, "5511911110000", "5511922220000")
    http = FakeHttp()

    dispatch_reminders(session, final.id, "120363@g.us", gateway=_gateway(session, http), today=TODAY)

    assert len(http.calls) == 1


def test_group_mode_with_override_credentials(session: Session, games, green_api_env):
    final, _, _ = games
    http = FakeHttp()

    dispatch_reminders(
        session,
        final.id,
        "120363@g.us",
        credentials=GreenApiCredentials("777", "override"),
        gateway=_gateway(session, http),
        today=TODAY,
    )

    assert "/waInstance777/sendMessage/override" in http.calls[0]["url"]


# ---------------------------------------------------------------------------
# Broadcast mode
# ---------------------------------------------------------------------------


def test_broadcast_without_contacts(session: Session, games, green_api_env):
    final, _, _ = games
    session.add(Profile(name="No phone", phone=None))
    session.commit()
    http = FakeHttp()

    with pytest.raises(NoRecipientsError):
        dispatch_reminders(session, final.id, gateway=_gateway(session, http), today=TODAY)
    assert http.calls == []


def test_broadcast_without_valid_phones(session: Session, games, green_api_env):
    final, _, _ = games
    _add_profiles(session, "", "   ", "—")
    http = FakeHttp()

    with pytest.raises(NoRecipientsError, match="valid"):
        dispatch_reminders(session, final.id, gateway=_gateway(session, http), today=TODAY)
    assert http.calls == []


def test_broadcast_sends_one_per_phone(session: Session, games, green_api_env):
    final, _, _ = games
    _add_profiles(session, "5511911110000", "+55 11 92222-0000", "")
    http = FakeHttp()

    result = dispatch_reminders(session, final.id, "   ", gateway=_gateway(session, http), today=TODAY)

    assert result.mode == "broadcast"
    assert result.sent == 2
    assert result.message == "2 reminders sent"
    assert sorted(c["json"]["chatId"] for c in http.calls) == [
        "5511911110000@c.us",
        "5511922220000@c.us",
    ]
    logs = session.exec(select(NotificationLog)).all()
    assert {log.type for log in logs} == {"game_reminder"}
    assert len(logs) == 2


def test_broadcast_counts_contacts_sharing_a_number(session: Session, games, green_api_env):
    final, _, _ = games
    _add_profiles(session, "5511911110000", "+55 11 91111-0000")
    http = FakeHttp()

    result = dispatch_reminders(session, final.id, gateway=_gateway(session, http), today=TODAY)

    assert result.sent == 2
    assert result.message == "2 reminders sent"
    assert len(http.calls) == 2


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


def test_gateway_failure_becomes_dispatch_error(session: Session, games, green_api_env):
    final, _, _ = games
    http = FakeHttp([FakeResponse(401, text="Unauthorized")])

    with pytest.raises(DispatchError) as exc_info:
        dispatch_reminders(session, final.id, "120363@g.us", gateway=_gateway(session, http), today=TODAY)

    assert exc_info.value.__cause__.status_code == 401
    assert session.exec(select(NotificationLog)).all() == []


def test_missing_credentials_becomes_dispatch_error(session: Session, games, monkeypatch):
    monkeypatch.delenv("GREEN_API_ID_INSTANCE", raising=False)
    monkeypatch.delenv("GREEN_API_ACCESS_TOKEN", raising=False)
    final, _, _ = games
    http = FakeHttp()

    with pytest.raises(DispatchError):
        dispatch_reminders(session, final.id, "120363@g.us", gateway=_gateway(session, http), today=TODAY)
    assert http.calls == []


def test_broadcast_partial_failure_keeps_earlier_sends(session: Session, games, green_api_env):
    final, _, _ = games
    _add_profiles(session, "5511900000001", "5511900000002", "5511900000003")
    http = FakeHttp([FakeResponse(200, {"idMessage": "A"}), FakeResponse(503, text="busy")])

    with pytest.raises(DispatchError):
        dispatch_reminders(session, final.id, gateway=_gateway(session, http), today=TODAY)

    assert len(http.calls) == 2
    assert len(session.exec(select(NotificationLog)).all()) == 1
