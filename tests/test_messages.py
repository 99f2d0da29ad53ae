import smtplib

import pytest

from santa_exchange.errors import NoActiveMatch
from santa_exchange.mail import Mailer
from santa_exchange.models import Match, Message
from santa_exchange.notifications import preview
from santa_exchange.services.assignments import assignment_for, rerun_draw, run_draw
from santa_exchange.services.messages import TO_RECEIVER, TO_SANTA, conversation, send_message


@pytest.fixture
def drawn(make_event, add_participants):
    event = make_event()
    people = add_participants(event, ["Annabel", "Bartholomew", "Cordelia"])
    run_draw(event)
    return event, people


def _pair(people):
    giver = people[0]
    receiver_id = assignment_for(giver).receiver_id
    receiver = next(p for p in people if p.id == receiver_id)
    return giver, receiver


def test_giver_messages_receiver(drawn, outbox):
    event, people = drawn
    giver, receiver = _pair(people)
    outbox.clear()

    message, notification = send_message(giver, "What size are you?", to=TO_RECEIVER)

    assert notification.ok
    assert message.sender_id == giver.id
    assert message.recipient_id == receiver.id
    assert message.match_id == assignment_for(giver).id
    assert [msg["To"] for msg in outbox] == [receiver.email]


def test_notification_never_names_sender(drawn, outbox):
    event, people = drawn
    giver, receiver = _pair(people)
    outbox.clear()

    send_message(giver, "Do you like tea?")

    body = outbox[0].get_body(preferencelist=("plain",)).get_content()
    html = outbox[0].get_body(preferencelist=("html",)).get_content()
    assert "Do you like tea?" in body
    assert giver.name not in body
    assert giver.name not in html
    assert giver.email not in body


def test_receiver_replies_to_santa(drawn):
    event, people = drawn
    giver, receiver = _pair(people)
    send_message(giver, "Hi!")

    reply, _ = send_message(receiver, "Hello Santa", to=TO_SANTA)
    assert reply.recipient_id == giver.id

    from_giver_side = conversation(giver, TO_RECEIVER)
    from_receiver_side = conversation(receiver, TO_SANTA)

    assert from_giver_side["counterpart"] == receiver.name
    assert from_receiver_side["counterpart"] == "Your Secret Santa"
    assert [m["from_me"] for m in from_giver_side["messages"]] == [True, False]
    assert [m["from_me"] for m in from_receiver_side["messages"]] == [False, True]
    assert all("sender_id" not in m for m in from_receiver_side["messages"])


def test_no_messages_before_draw(make_event, add_participants):
    event = make_event()
    ann, _ = add_participants(event, ["Ann", "Ben"])

    with pytest.raises(NoActiveMatch):
        send_message(ann, "anyone there?")
    assert Message.query.count() == 0


def test_redraw_invalidates_conversations(drawn):
    event, people = drawn
    giver, _ = _pair(people)
    send_message(giver, "before the re-draw")

    rerun_draw(event)

    assert Message.query.filter_by(event_id=event.id).count() == 0
    assert conversation(giver, TO_RECEIVER)["messages"] == []
    assert Match.query.filter_by(event_id=event.id).count() == 3


def test_message_kept_when_email_fails(monkeypatch, drawn):
    event, people = drawn
    giver, _ = _pair(people)

    def refuse(self, msg):
        raise smtplib.SMTPException("relay denied")

    monkeypatch.setattr(Mailer, "send", refuse)

    message, notification = send_message(giver, "still saved")

    assert not notification.ok
    assert "relay denied" in notification.warning
    assert Message.query.filter_by(id=message.id).count() == 1


def test_preview_truncates_long_messages():
    assert preview("short") == "short"
    assert preview("x" * 100) == "x" * 100
    assert preview("x" * 101) == "x" * 100 + "..."
