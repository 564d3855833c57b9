import base64

import pytest

from checkin.schemas import Badge, BadgeType
from checkin.services import badge_email_service
from checkin.services.badge_email_service import BadgeEmailDispatcher, build_badge_email_text
from checkin.services.codes import render_code_svg, svg_data_uri


def make_badge(badge_id, email, **fields):
    return Badge(badge_id=badge_id, name=fields.pop("name", "Ada"), email=email, **fields)


@pytest.fixture
def dispatcher(email_service):
    return BadgeEmailDispatcher(email_service, delay_seconds=0)


def test_render_code_svg():
    svg = render_code_svg("BDG-123456")
    assert b"<svg" in svg
    assert svg_data_uri(svg).startswith("data:image/svg+xml;base64,")
    assert base64.b64decode(svg_data_uri(svg).split(",", 1)[1]) == svg


def test_batch_isolates_invalid_address(dispatcher, email_service):
    badges = [
        make_badge("BDG-000001", "a@example.com"),
        make_badge("BDG-000002", "not-an-address"),
        make_badge("BDG-000003", "c@example.com"),
    ]

    results = dispatcher.send_badge_emails(badges)

    assert [r.badge_id for r in results] == ["BDG-000001", "BDG-000002", "BDG-000003"]
    assert [r.success for r in results] == [True, False, True]
    assert results[1].error == "Invalid email address"
    assert [m["to"] for m in email_service.sent] == [["a@example.com"], ["c@example.com"]]


def test_transport_failure_does_not_abort_batch(dispatcher, email_service):
    email_service.fail_for.add("a@example.com")
    email_service.raise_for.add("b@example.com")
    badges = [
        make_badge("BDG-000001", "a@example.com"),
        make_badge("BDG-000002", "b@example.com"),
        make_badge("BDG-000003", "c@example.com"),
    ]

    results = dispatcher.send_badge_emails(badges)

    assert [r.success for r in results] == [False, False, True]
    assert results[0].error == "Failed to send email"
    assert results[1].error == "connection reset"


def test_message_embeds_and_attaches_code(dispatcher, email_service):
    badge = make_badge(
        "BDG-000042", "grace@example.com", name="<Grace>", type=BadgeType.MULTIDAY, days=[2, 3], companion="Ken"
    )

    result = dispatcher.send_badge_email(badge)

    assert result.success
    message = email_service.sent[0]
    assert message["subject"] == "Your Event Badge - BDG-000042"
    assert "data:image/svg+xml;base64," in message["html"]
    assert "&lt;Grace&gt;" in message["html"]
    assert "<Grace>" not in message["html"]
    assert "Valid for days: 2, 3" in message["text"]
    filename, content, mime_type = message["attachments"][0]
    assert filename == "badge-BDG-000042.svg"
    assert mime_type == "image/svg+xml"
    assert b"<svg" in content


def test_regular_badge_text_mentions_all_days():
    text = build_badge_email_text(make_badge("BDG-000001", "a@example.com"))
    assert "Valid for all event days" in text
    assert "Companion" not in text


def test_pause_between_sends(email_service, monkeypatch):
    pauses = []
    monkeypatch.setattr(badge_email_service.time, "sleep", pauses.append)
    dispatcher = BadgeEmailDispatcher(email_service, delay_seconds=0.1)

    dispatcher.send_badge_emails([make_badge(f"BDG-00000{i}", f"p{i}@example.com") for i in range(3)])

    assert pauses == [0.1, 0.1]
