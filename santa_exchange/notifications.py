"""Transactional email: welcome, assignment and new-message notifications.

Delivery is best-effort. A failed send is logged and reported back as a
failed NotificationResult; it never raises into, or rolls back, the
registration, draw or message that triggered it.
"""
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass

from flask import current_app, render_template, request, has_request_context
from jinja2 import TemplateError

from .extensions import db
from .errors import NotFound
from .mail import get_mailer
from .models import Event, Match, Message, Participant
from .security import issue_participant_token

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


@dataclass
class NotificationResult:
    recipient: str
    ok: bool
    error: str | None = None

    @property
    def warning(self) -> str | None:
        if self.ok:
            return None
        return f"Email to {self.recipient} could not be sent: {self.error}"


def _base_url() -> str:
    base = (current_app.config.get("PUBLIC_BASE_URL") or "").strip()
    if not base and has_request_context():
        base = request.host_url
    return base.rstrip("/")


def status_link(participant: Participant) -> str:
    path = current_app.config["STATUS_LINK_PATH"].format(
        event_id=participant.event_id,
        token=issue_participant_token(participant.id),
    )
    return _base_url() + path


def chat_link(participant: Participant) -> str:
    path = current_app.config["CHAT_LINK_PATH"].format(
        event_id=participant.event_id,
        token=issue_participant_token(participant.id),
    )
    return _base_url() + path


def preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    if len(content) <= length:
        return content
    return content[:length] + "..."


def _deliver(to: str, subject: str, template: str, **context) -> NotificationResult:
    mailer = get_mailer()
    try:
        msg = mailer.build_message(
            to=to,
            subject=subject,
            text=render_template(f"email/{template}.txt", **context),
            html=render_template(f"email/{template}.html", **context),
        )
        mailer.send(msg)
    except (smtplib.SMTPException, OSError, ValueError, TemplateError) as e:
        # Bad header values and template errors count as a failed send too.
        logger.warning("Failed to send %s email to %s: %s", template, to, e)
        return NotificationResult(recipient=to, ok=False, error=str(e) or e.__class__.__name__)
    return NotificationResult(recipient=to, ok=True)


def send_welcome_email(participant_id: int, event_id: int) -> NotificationResult:
    participant = db.session.get(Participant, participant_id)
    event = db.session.get(Event, event_id)
    if participant is None or event is None:
        raise NotFound("Participant or event not found.")

    return _deliver(
        participant.email,
        f"Welcome to {event.name}!",
        "welcome",
        participant=participant,
        event=event,
        status_url=status_link(participant),
    )


def send_assignment_emails(event_id: int) -> list[NotificationResult]:
    """Email every giver of the event's current assignment set."""
    matches = (
        Match.query.filter_by(event_id=event_id)
        .order_by(Match.id.asc())
        .all()
    )
    results = []
    for match in matches:
        results.append(
            _deliver(
                match.giver.email,
                "Your Secret Santa Assignment!",
                "assignment",
                giver=match.giver,
                receiver=match.receiver,
                chat_url=chat_link(match.giver),
            )
        )
    failed = sum(1 for r in results if not r.ok)
    if failed:
        logger.warning("Event %s: %d of %d assignment emails failed", event_id, failed, len(results))
    return results


def send_message_notification(message_id: int) -> NotificationResult:
    """Tell the recipient a message is waiting. The sender is never named."""
    message = db.session.get(Message, message_id)
    if message is None:
        raise NotFound("Message not found.")

    recipient = message.recipient
    return _deliver(
        recipient.email,
        "New Secret Santa Message!",
        "message",
        recipient=recipient,
        preview=preview(message.content),
        chat_url=chat_link(recipient),
    )
