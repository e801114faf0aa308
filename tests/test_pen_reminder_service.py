"""Tests for pen reminder responses."""

from datetime import date, timedelta
from uuid import uuid4

from allerwise.domain.pen_reminders import pen_reminder_id
from allerwise.services.pen_reminders import PenReminderService
from tests.conftest import InMemoryPenReminderRepository


def test_one_response_per_day() -> None:
    service = PenReminderService(InMemoryPenReminderRepository())
    user_id = uuid4()
    day = date(2024, 6, 1)

    service.record_response(user_id, pen_carried=False, today=day)
    response = service.record_response(user_id, pen_carried=True, today=day)

    assert response.id == pen_reminder_id(day) == "pen_reminder_2024-06-01"
    assert len(service.list_responses(user_id)) == 1
    assert service.get_response_for_date(user_id, day).pen_carried
    assert service.has_response_for_date(user_id, day)
    assert not service.has_response_for_date(user_id, day + timedelta(days=1))


def test_calendar_markers_split_answers() -> None:
    service = PenReminderService(InMemoryPenReminderRepository())
    user_id = uuid4()
    service.record_response(user_id, True, today=date(2024, 6, 1))
    service.record_response(user_id, False, today=date(2024, 6, 2))

    markers = service.calendar_markers(user_id)

    assert markers.carried == [date(2024, 6, 1)]
    assert markers.not_carried == [date(2024, 6, 2)]


def test_monthly_compliance_rate() -> None:
    service = PenReminderService(InMemoryPenReminderRepository())
    user_id = uuid4()
    today = date(2024, 6, 30)

    assert service.monthly_compliance_rate(user_id, today=today) == 0.0

    service.record_response(user_id, True, today=today)
    service.record_response(user_id, True, today=today - timedelta(days=1))
    service.record_response(user_id, False, today=today - timedelta(days=2))
    service.record_response(user_id, False, today=today - timedelta(days=45))

    assert service.monthly_compliance_rate(user_id, today=today) == 2 / 3
    assert len(service.recent_responses(user_id, days=7, today=today)) == 3
