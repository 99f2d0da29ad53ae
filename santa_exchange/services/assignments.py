from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime

import sqlalchemy as sa
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import ConcurrentDrawError, PersistenceError, RosterTooSmall, SantaError
from ..lifecycle import ensure_can_draw, ensure_can_redraw
from ..models import Event, Match, Message, Participant
from ..notifications import NotificationResult, send_assignment_emails
from ..pairing import compute_derangement, verify_assignment_set
from .events import roster_size

logger = logging.getLogger(__name__)


@dataclass
class DrawOutcome:
    event_id: int
    assignment_count: int
    redraw: bool = False
    notifications: list[NotificationResult] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        return [n.warning for n in self.notifications if not n.ok]

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": "Secret Santa re-draw completed!" if self.redraw else "Secret Santa draw completed!",
            "assignments": self.assignment_count,
            "emails_sent": sum(1 for n in self.notifications if n.ok),
            "warnings": self.warnings,
        }


def run_draw(event: Event, *, rng: random.Random | None = None) -> DrawOutcome:
    """First draw for an event. Only legal while draw_completed is false."""
    ensure_can_draw(event)
    return _draw(event, expect_completed=False, rng=rng)


def rerun_draw(event: Event, *, rng: random.Random | None = None) -> DrawOutcome:
    """
    Throw away every pairing and message of the event and draw again.
    Only legal once the event has been drawn; draw_completed stays true.
    Confirmation is the caller's job.
    """
    ensure_can_redraw(event)
    return _draw(event, expect_completed=True, rng=rng)


def _draw(event: Event, *, expect_completed: bool, rng: random.Random | None) -> DrawOutcome:
    event_id = event.id
    generation = event.draw_generation

    if roster_size(event) < 2:
        raise RosterTooSmall()

    logger.info("Event %s: running %s", event_id, "re-draw" if expect_completed else "draw")
    try:
        _claim_event(event_id, generation, expect_completed)

        # Read the roster after the claim so it is the one the new set covers.
        ids = [
            pid
            for (pid,) in db.session.query(Participant.id)
            .filter_by(event_id=event_id)
            .order_by(Participant.id.asc())
        ]
        logger.info("Event %s: pairing %d participants", event_id, len(ids))
        pairs = compute_derangement(ids, rng=rng, max_attempts=current_app.config["DRAW_MAX_ATTEMPTS"])

        _replace_assignment_set(event_id, pairs)
        verify_assignment_set(ids, _stored_pairs(event_id))
        db.session.commit()
    except SantaError as e:
        db.session.rollback()
        logger.warning("Event %s: draw aborted: %s", event_id, e)
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Event %s: draw failed to persist", event_id)
        raise PersistenceError() from e

    logger.info("Event %s: draw committed (%d assignments)", event_id, len(pairs))

    # Best-effort; failures come back as warnings and never undo the commit.
    notifications = send_assignment_emails(event_id)
    return DrawOutcome(
        event_id=event_id,
        assignment_count=len(pairs),
        redraw=expect_completed,
        notifications=notifications,
    )


def _claim_event(event_id: int, generation: int, expect_completed: bool) -> None:
    """
    Conditional write that serializes draws per event: only one draw can move
    the event from ``generation`` to ``generation + 1``. Marks the event drawn
    in the same transaction as the new assignment set.
    """
    stmt = (
        sa.update(Event)
        .where(
            Event.id == event_id,
            Event.draw_generation == generation,
            Event.draw_completed == expect_completed,
        )
        .values(
            draw_generation=Event.draw_generation + 1,
            draw_completed=True,
            drawn_at=datetime.utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if db.session.execute(stmt).rowcount != 1:
        raise ConcurrentDrawError()


def _replace_assignment_set(event_id: int, pairs: dict[int, int]) -> None:
    # Messages reference matches, so they go first.
    Message.query.filter_by(event_id=event_id).delete()
    Match.query.filter_by(event_id=event_id).delete()
    db.session.add_all(
        Match(event_id=event_id, giver_id=giver_id, receiver_id=receiver_id)
        for giver_id, receiver_id in pairs.items()
    )
    db.session.flush()


def _stored_pairs(event_id: int) -> dict[int, int]:
    rows = db.session.query(Match.giver_id, Match.receiver_id).filter_by(event_id=event_id)
    return {giver_id: receiver_id for giver_id, receiver_id in rows}


def assignment_for(giver: Participant) -> Match | None:
    return Match.query.filter_by(event_id=giver.event_id, giver_id=giver.id).first()


def santa_match_for(receiver: Participant) -> Match | None:
    return Match.query.filter_by(event_id=receiver.event_id, receiver_id=receiver.id).first()


def participant_status(participant: Participant) -> dict:
    """What a waiting participant polls for: has the draw reached them yet?"""
    event = participant.event
    return {
        "participant": {"id": participant.id, "name": participant.name},
        "event": {"id": event.id, "name": event.name},
        "registration_open": event.registration_open,
        "draw_completed": event.draw_completed,
        "assigned": assignment_for(participant) is not None,
    }
