import pytest
from django.core import mail

from bookings import services
from bookings.models import Booking
from notifications import tasks
from notifications.models import NotificationLog

pytestmark = pytest.mark.django_db


def test_booking_created_emails_vendor_and_customer(booking_factory, vendor_user, settings):
    settings.DEFAULT_FROM_EMAIL = "noreply@test.local"
    booking = booking_factory(quantity=2)

    tasks.send_booking_created_email(booking.id)

    recipients = sorted(message.to[0] for message in mail.outbox)
    assert recipients == ["customer@example.com", "vendor@example.com"]
    vendor_mail = next(m for m in mail.outbox if m.to == ["vendor@example.com"])
    assert vendor_mail.subject == "New booking for Cedar Ridge Cottages"
    assert "Hill Stays" in vendor_mail.body
    assert "2 x Deluxe Room" in vendor_mail.body
    assert "INR 8800.00" in vendor_mail.body
    assert vendor_mail.from_email == "noreply@test.local"

    logs = NotificationLog.objects.filter(booking_id=booking.id)
    assert {log.type for log in logs} == {"booking_created_vendor", "booking_created_customer"}
    assert all(log.status == NotificationLog.Status.SENT for log in logs)


def test_emails_are_plain_text(booking_factory):
    booking = booking_factory()

    tasks.send_booking_created_email(booking.id)

    assert mail.outbox
    for message in mail.outbox:
        assert message.content_subtype == "plain"
        assert getattr(message, "alternatives", []) == []
        assert message.body.strip()


def test_prepare_email_body_renders_text_template(booking_factory):
    booking = booking_factory()
    context = tasks._booking_context(booking)

    body = tasks._prepare_email_body("Subject", "booking_status_update.txt", context)

    assert "Cedar Ridge Cottages" in body
    assert tasks._prepare_email_body("Subject", None, context) == ""


def test_status_email_includes_cancellation_reason(booking_factory, customer_user):
    booking = booking_factory()
    services.transition_booking_status(
        booking.id, Booking.Status.CANCELLED, user=customer_user, reason="Weather"
    )

    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == ["customer@example.com"]
    assert message.subject == "Your booking for Cedar Ridge Cottages was cancelled"
    assert "Reason: Weather" in message.body
    log = NotificationLog.objects.get(booking_id=booking.id)
    assert log.type == "booking_status_update"
    assert log.recipient == "customer@example.com"


def test_send_failure_is_logged(booking_factory, monkeypatch):
    booking = booking_factory()

    def _raise(*args, **kwargs):
        raise RuntimeError("smtp down")

    monkeypatch.setattr(tasks.EmailMessage, "send", _raise)

    assert tasks._send_email_logged(
        "custom_fail",
        to_email="fail@example.com",
        subject="Test",
        body="Body",
        booking_id=booking.id,
    ) is False

    log = NotificationLog.objects.get(booking_id=booking.id)
    assert log.status == NotificationLog.Status.FAILED
    assert log.error == "smtp down"


def test_missing_recipient_is_logged():
    assert tasks._send_email_logged("no_recipient", to_email="", subject="Hi", body="x") is False
    log = NotificationLog.objects.get(type="no_recipient")
    assert log.status == NotificationLog.Status.FAILED
    assert log.error == "missing recipient email"
    assert mail.outbox == []


def test_missing_booking_is_ignored():
    tasks.send_booking_created_email(999999)
    tasks.send_booking_status_email(999999, "confirmed")
    assert mail.outbox == []
    assert not NotificationLog.objects.exists()


def test_queue_failure_does_not_fail_booking(
    booking_payload, api_client, monkeypatch
):
    def _broker_down(*args, **kwargs):
        raise ConnectionError("broker unavailable")

    monkeypatch.setattr(tasks.send_booking_created_email, "delay", _broker_down)

    resp = api_client.post("/api/bookings/", booking_payload(), format="json")

    assert resp.status_code == 201
    assert Booking.objects.count() == 1
