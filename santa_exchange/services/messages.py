from __future__ import annotations

import logging

from ..extensions import db
from ..errors import NoActiveMatch
from ..models import Match, Message, Participant
from ..notifications import NotificationResult, send_message_notification
from .assignments import assignment_for, santa_match_for

logger = logging.getLogger(__name__)

TO_RECEIVER = "receiver"
TO_SANTA = "santa"


def _match_for(participant: Participant, counterpart: str) -> Match:
    if counterpart == TO_RECEIVER:
        match = assignment_for(participant)
    elif counterpart == TO_SANTA:
        match = santa_match_for(participant)
    else:
        raise ValueError(f"Unknown counterpart: {counterpart!r}")
    if match is None:
        raise NoActiveMatch()
    return match


def send_message(sender: Participant, content: str, to: str = TO_RECEIVER) -> tuple[Message, NotificationResult]:
    """
    Store a message on the sender's live match and notify the recipient.

    A giver writes to their receiver; a receiver can only answer their
    (anonymous) Santa. Messages die with the match on re-draw.
    """
    match = _match_for(sender, to)
    recipient_id = match.receiver_id if to == TO_RECEIVER else match.giver_id

    message = Message(
        event_id=match.event_id,
        match_id=match.id,
        sender_id=sender.id,
        recipient_id=recipient_id,
        content=content,
    )
    db.session.add(message)
    db.session.commit()
    logger.info("Event %s: message %s relayed on match %s", match.event_id, message.id, match.id)

    return message, send_message_notification(message.id)


def conversation(participant: Participant, counterpart: str = TO_RECEIVER) -> dict:
    match = _match_for(participant, counterpart)
    messages = (
        Message.query.filter_by(match_id=match.id)
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )
    if counterpart == TO_RECEIVER:
        title = match.receiver.name
    else:
        title = "Your Secret Santa"
    return {
        "with": counterpart,
        "counterpart": title,
        "messages": [serialize_message(m, participant) for m in messages],
    }


def serialize_message(message: Message, viewer: Participant) -> dict:
    # Never includes sender identity; the viewer only learns which side wrote it.
    return {
        "id": message.id,
        "content": message.content,
        "created_at": message.created_at.isoformat(),
        "from_me": message.sender_id == viewer.id,
    }
