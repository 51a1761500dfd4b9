import asyncio

import pytest

from letteros.models.newsletter import Newsletter, NewsletterStatus, SendRequest
from letteros.services import newsletter_service as service_module
from letteros.services.email_service import format_content_html
from letteros.services.newsletter_service import NewsletterService, NoRecipientsError


class FakeEmailService:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent = []

    async def send_newsletter_email(self, to_email, title, content, product_name=None, unsubscribe_url=None):
        if to_email in self.failing:
            raise ValueError("MessageRejected")
        self.sent.append({"to": to_email, "title": title, "unsubscribe_url": unsubscribe_url})
        return {"success": True, "message_id": f"msg-{to_email}"}


class FakeNewsletterRepository:
    sends = []
    statuses = []

    def __init__(self, connection):
        pass

    async def record_sends(self, newsletter_id, subject, deliveries):
        FakeNewsletterRepository.sends.extend(deliveries)

    async def mark_status(self, newsletter_id, status, sent_at=None):
        FakeNewsletterRepository.statuses.append((newsletter_id, status, sent_at))


class FakeSubscriberRepository:
    rows = []

    def __init__(self, connection):
        pass

    async def list_for_user(self, user_id, search=None, tag=None):
        return [row for row in self.rows if tag is None or tag in row["tags"]]


@pytest.fixture
def email(monkeypatch):
    async def connect():
        return object()

    async def release(connection):
        return None

    FakeNewsletterRepository.sends = []
    FakeNewsletterRepository.statuses = []
    FakeSubscriberRepository.rows = [
        {"id": "sub-1", "email": "a@example.com", "tags": ["vip"]},
        {"id": "sub-2", "email": "b@example.com", "tags": []},
        {"id": "sub-3", "email": "c@example.com", "tags": ["vip"]},
    ]
    fake = FakeEmailService()
    monkeypatch.setattr(service_module, "get_db_connection", connect)
    monkeypatch.setattr(service_module, "release_db_connection", release)
    monkeypatch.setattr(service_module, "NewsletterRepository", FakeNewsletterRepository)
    monkeypatch.setattr(service_module, "SubscriberRepository", FakeSubscriberRepository)
    monkeypatch.setattr(service_module, "email_service", fake)
    monkeypatch.setattr(service_module.settings, "send_batch_size", 2)
    monkeypatch.setattr(service_module.settings, "send_batch_pause_seconds", 0)
    return fake


def make_newsletter():
    return Newsletter(id="n-1", user_id="u-1", title="Part one", content="Hello", status=NewsletterStatus.DRAFT)


def test_test_send_leaves_status_alone(email):
    result = asyncio.run(NewsletterService().send(make_newsletter(), "u-1", SendRequest(to="me@example.com")))

    assert result.total == 1
    assert result.successful == 1
    assert result.message_id == "msg-me@example.com"
    assert result.status is None
    assert FakeNewsletterRepository.statuses == []
    assert email.sent[0]["unsubscribe_url"] is None


def test_send_to_tagged_subscribers_marks_sent(email):
    request = SendRequest(send_to_subscribers=True, tag="vip")

    result = asyncio.run(NewsletterService().send(make_newsletter(), "u-1", request))

    assert result.total == 2
    assert result.status == NewsletterStatus.SENT
    assert [s["to"] for s in email.sent] == ["a@example.com", "c@example.com"]
    assert email.sent[0]["unsubscribe_url"].endswith("/unsubscribe/sub-1")
    assert FakeNewsletterRepository.statuses[0][1] == "SENT"
    assert len(FakeNewsletterRepository.sends) == 2


def test_failed_deliveries_are_recorded(email):
    email.failing = {"b@example.com"}

    result = asyncio.run(NewsletterService().send(make_newsletter(), "u-1", SendRequest(send_to_subscribers=True)))

    assert result.total == 3
    assert result.successful == 2
    assert result.failed == 1
    failed = [d for d in FakeNewsletterRepository.sends if d["status"] == "FAILED"]
    assert failed[0]["recipient"] == "b@example.com"
    assert "MessageRejected" in failed[0]["error"]


def test_every_delivery_failing_marks_failed(email):
    email.failing = {"a@example.com", "b@example.com", "c@example.com"}

    result = asyncio.run(NewsletterService().send(make_newsletter(), "u-1", SendRequest(send_to_subscribers=True)))

    assert result.status == NewsletterStatus.FAILED
    assert FakeNewsletterRepository.statuses[0][2] is None


def test_no_recipients(email):
    with pytest.raises(NoRecipientsError):
        asyncio.run(NewsletterService().send(make_newsletter(), "u-1", SendRequest()))

    FakeSubscriberRepository.rows = []
    with pytest.raises(NoRecipientsError):
        asyncio.run(NewsletterService().send(make_newsletter(), "u-1", SendRequest(send_to_subscribers=True)))


def test_format_content_html():
    assert format_content_html("Hi **there**\n\n<b>x</b>") == "<p>Hi <strong>there</strong></p><p>&lt;b&gt;x&lt;/b&gt;</p>"
