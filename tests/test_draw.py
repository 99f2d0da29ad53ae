import random
import smtplib

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from santa_exchange.errors import (
    ConcurrentDrawError,
    DrawStateError,
    PairingError,
    PersistenceError,
    RosterTooSmall,
)
from santa_exchange.extensions import db
from santa_exchange.mail import Mailer
from santa_exchange.models import Event, Match, Message
from santa_exchange.services import assignments
from santa_exchange.services.assignments import rerun_draw, run_draw


def _pairs(event_id):
    return {m.giver_id: m.receiver_id for m in Match.query.filter_by(event_id=event_id)}


def _assert_valid_derangement(event_id, participant_ids):
    pairs = _pairs(event_id)
    assert len(pairs) == len(participant_ids)
    assert set(pairs.keys()) == set(participant_ids)
    assert set(pairs.values()) == set(participant_ids)
    assert all(g != r for g, r in pairs.items())


def _seed_existing_draw(event, people):
    """A -> B, B -> C, C -> A plus a message on every match."""
    a, b, c = people
    matches = [
        Match(event_id=event.id, giver_id=a.id, receiver_id=b.id),
        Match(event_id=event.id, giver_id=b.id, receiver_id=c.id),
        Match(event_id=event.id, giver_id=c.id, receiver_id=a.id),
    ]
    db.session.add_all(matches)
    db.session.flush()
    for m in matches:
        db.session.add(Message(event_id=event.id, match_id=m.id, sender_id=m.giver_id,
                               recipient_id=m.receiver_id, content="hello"))
    event.draw_completed = True
    event.draw_generation = 1
    db.session.commit()


def test_draw_three_people(make_event, add_participants, outbox):
    event = make_event()
    people = add_participants(event, ["A", "B", "C"])
    outbox.clear()

    outcome = run_draw(event)

    assert outcome.assignment_count == 3
    assert outcome.warnings == []
    _assert_valid_derangement(event.id, [p.id for p in people])
    assert db.session.get(Event, event.id).draw_completed is True
    assert sorted(msg["To"] for msg in outbox) == sorted(p.email for p in people)


def test_assignment_email_names_receiver_and_wishlist(make_event, add_participants, outbox):
    event = make_event()
    a, b = add_participants(event, ["Ann", "Ben"])
    outbox.clear()

    run_draw(event)

    to_ann = next(msg for msg in outbox if msg["To"] == a.email)
    body = to_ann.get_body(preferencelist=("plain",)).get_content()
    assert "Ben" in body
    assert "Ben likes socks" in body
    assert "https://santa.example.com/chat/" in body


def test_draw_with_one_participant_changes_nothing(make_event, add_participants):
    event = make_event()
    add_participants(event, ["Solo"])

    with pytest.raises(RosterTooSmall):
        run_draw(event)

    assert Match.query.count() == 0
    assert db.session.get(Event, event.id).draw_completed is False


def test_draw_with_empty_roster(make_event):
    event = make_event()
    with pytest.raises(RosterTooSmall):
        run_draw(event)
    assert Match.query.count() == 0


def test_second_draw_requires_redraw(make_event, add_participants):
    event = make_event()
    add_participants(event, ["A", "B"])
    run_draw(event)

    with pytest.raises(DrawStateError):
        run_draw(event)


def test_redraw_before_draw_rejected(make_event, add_participants):
    event = make_event()
    add_participants(event, ["A", "B"])

    with pytest.raises(DrawStateError):
        rerun_draw(event)
    assert Match.query.count() == 0


def test_redraw_replaces_matches_and_clears_messages(make_event, add_participants, outbox):
    event = make_event()
    people = add_participants(event, ["A", "B", "C"])
    _seed_existing_draw(event, people)
    assert Message.query.filter_by(event_id=event.id).count() == 3
    outbox.clear()

    outcome = rerun_draw(event)

    event = db.session.get(Event, event.id)
    assert outcome.redraw is True
    assert event.draw_completed is True
    assert event.draw_generation == 2
    assert Message.query.filter_by(event_id=event.id).count() == 0
    assert Match.query.filter_by(event_id=event.id).count() == 3
    _assert_valid_derangement(event.id, [p.id for p in people])
    assert len(outbox) == 3


def test_redraw_picks_up_late_registrations(make_event, add_participants):
    event = make_event()
    add_participants(event, ["A", "B"])
    run_draw(event)
    late = add_participants(event, ["C", "D"])

    rerun_draw(event)

    pairs = _pairs(event.id)
    assert len(pairs) == 4
    assert all(p.id in pairs for p in late)


def test_redraw_only_touches_its_own_event(make_event, add_participants):
    mine, other = make_event("Mine"), make_event("Other")
    add_participants(mine, ["A", "B", "C"])
    others = add_participants(other, ["X", "Y"])
    run_draw(mine)
    run_draw(other)
    before = _pairs(other.id)

    rerun_draw(mine)

    assert _pairs(other.id) == before
    _assert_valid_derangement(other.id, [p.id for p in others])


def test_stale_generation_is_rejected(make_event, add_participants):
    event = make_event()
    add_participants(event, ["A", "B", "C"])
    assert event.draw_generation == 0
    # Another request drew first; this session still holds the old generation.
    db.session.execute(
        sa.update(Event)
        .where(Event.id == event.id)
        .values(draw_generation=Event.draw_generation + 1)
        .execution_options(synchronize_session=False)
    )

    with pytest.raises(ConcurrentDrawError):
        run_draw(event)

    assert Match.query.count() == 0
    assert db.session.get(Event, event.id).draw_completed is False


def test_exhausted_pairing_aborts_without_writes(app, make_event, add_participants):
    class NoShuffle(random.Random):
        def shuffle(self, x):
            pass

    event = make_event()
    add_participants(event, ["A", "B", "C"])
    app.config["DRAW_MAX_ATTEMPTS"] = 3

    with pytest.raises(PairingError):
        run_draw(event, rng=NoShuffle())

    event = db.session.get(Event, event.id)
    assert Match.query.count() == 0
    assert event.draw_completed is False
    assert event.draw_generation == 0


def test_persistence_failure_keeps_previous_set(monkeypatch, make_event, add_participants):
    event = make_event()
    people = add_participants(event, ["A", "B", "C"])
    _seed_existing_draw(event, people)
    before = _pairs(event.id)

    def broken(event_id, pairs):
        Message.query.filter_by(event_id=event_id).delete()
        Match.query.filter_by(event_id=event_id).delete()
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(assignments, "_replace_assignment_set", broken)

    with pytest.raises(PersistenceError):
        rerun_draw(event)

    event = db.session.get(Event, event.id)
    assert _pairs(event.id) == before
    assert Message.query.filter_by(event_id=event.id).count() == 3
    assert event.draw_generation == 1


def test_email_failure_does_not_undo_draw(monkeypatch, make_event, add_participants):
    event = make_event()
    people = add_participants(event, ["A", "B", "C"])

    def refuse(self, msg):
        raise smtplib.SMTPServerDisconnected("gone")

    monkeypatch.setattr(Mailer, "send", refuse)

    outcome = run_draw(event)

    assert len(outcome.warnings) == 3
    assert outcome.to_dict()["success"] is True
    assert outcome.to_dict()["emails_sent"] == 0
    _assert_valid_derangement(event.id, [p.id for p in people])
    assert db.session.get(Event, event.id).draw_completed is True
