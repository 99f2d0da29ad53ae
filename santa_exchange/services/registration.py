from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import DuplicateRegistration
from ..lifecycle import ensure_can_register
from ..models import Event, Participant

logger = logging.getLogger(__name__)


def register_participant(
    event: Event,
    name: str,
    email: str,
    wishlist_q1: str,
    wishlist_q2: str,
) -> Participant:
    """
    Add a participant to the roster.

    Rejected while registration is closed, and for an email that is already
    registered for this event (the same email may join other events).
    Nothing is written when either check fails.
    """
    ensure_can_register(event)

    email = email.strip().lower()
    if Participant.query.filter_by(event_id=event.id, email=email).first():
        raise DuplicateRegistration()

    p = Participant(
        event_id=event.id,
        name=name,
        email=email,
        wishlist_q1=wishlist_q1,
        wishlist_q2=wishlist_q2,
    )
    db.session.add(p)
    try:
        db.session.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent join using the same email.
        db.session.rollback()
        raise DuplicateRegistration() from e

    logger.info("Participant %s joined event %s", p.id, event.id)
    return p
