import pytest

from apps.bookings.models import Reservation as ReservationModel
from apps.bookings.tasks import expire_draft_reservations


@pytest.mark.django_db
def test_expire_draft_reservations_task(add_reservation):
    drafts = [add_reservation() for _ in range(3)]
    confirmed = add_reservation(confirmed=True)

    result = expire_draft_reservations.delay().get()

    assert result == {"expired": 3}
    statuses = dict(ReservationModel.objects.values_list("id", "status"))
    assert all(statuses[draft.id] == "expired" for draft in drafts)
    assert statuses[confirmed.id] == "confirmed"


@pytest.mark.django_db
def test_expire_draft_reservations_task_without_drafts():
    assert expire_draft_reservations() == {"expired": 0}


def test_expiry_is_scheduled_with_configured_interval(settings):
    from config.celery import app

    entry = app.conf.beat_schedule["expire-draft-reservations"]

    assert entry["task"] == expire_draft_reservations.name
    assert entry["schedule"] == settings.CAR_RENTAL_EXPIRE_INTERVAL_SECONDS
