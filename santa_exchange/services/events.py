from __future__ import annotations

import logging

from ..extensions import db
from ..lifecycle import EventState, set_registration_open, state_of
from ..models import Event, Match, Participant
from ..security import generate_host_key, hash_host_key

logger = logging.getLogger(__name__)


def create_event(
    name: str,
    host_email: str,
    description: str | None = None,
    owner_id: str | None = None,
) -> tuple[Event, str]:
    """Create an event open for registration. Returns (event, host_key)."""
    host_key = generate_host_key()
    event = Event(
        name=name,
        host_email=host_email,
        description=description or None,
        owner_id=owner_id or None,
        host_key_hash=hash_host_key(host_key),
        registration_open=True,
        draw_completed=False,
    )
    db.session.add(event)
    db.session.commit()
    logger.info("Created event %s (%r)", event.id, event.name)
    return event, host_key


def roster(event: Event) -> list[Participant]:
    return event.participants.order_by(Participant.id.asc()).all()


def roster_size(event: Event) -> int:
    return event.participants.count()


def toggle_registration(event: Event, is_open: bool) -> EventState:
    state = set_registration_open(event, is_open)
    db.session.commit()
    logger.info("Event %s registration %s", event.id, "opened" if is_open else "closed")
    return state


def public_summary(event: Event) -> dict:
    return {
        "id": event.id,
        "name": event.name,
        "description": event.description,
        "registration_open": event.registration_open,
        "draw_completed": event.draw_completed,
        "state": state_of(event).value,
        "participant_count": roster_size(event),
    }


def host_dashboard(event: Event) -> dict:
    people = roster(event)
    state = state_of(event)
    data = public_summary(event)
    data.update(
        {
            "host_email": event.host_email,
            "owner_id": event.owner_id,
            "drawn_at": event.drawn_at.isoformat() if event.drawn_at else None,
            "match_count": Match.query.filter_by(event_id=event.id).count(),
            "can_draw": state is not EventState.DRAW_COMPLETE and len(people) >= 2,
            "can_redraw": state is EventState.DRAW_COMPLETE,
            "participants": [
                {
                    "id": p.id,
                    "name": p.name,
                    "email": p.email,
                    "registered_at": p.registered_at.isoformat(),
                }
                for p in people
            ],
        }
    )
    return data
