from __future__ import annotations

from flask import g, request
from flask.views import MethodView

from .extensions import db
from .errors import HostAuthError, NotFound
from .models import Event, Participant
from .security import read_participant_token, verify_host_key

HOST_KEY_HEADER = "X-Host-Key"


def load_event(event_id: int) -> Event:
    event = db.session.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found.")
    return event


def load_participant_from_token(token: str) -> Participant:
    participant = db.session.get(Participant, read_participant_token(token))
    if participant is None:
        raise NotFound("This link is not valid.")
    return participant


class HostRequiredMixin(MethodView):
    """
    Resolves <event_id> and checks the host key header against the event.
    The event is exposed as g.event.
    """
    def dispatch_request(self, *args, **kwargs):
        event = load_event(kwargs["event_id"])
        if not verify_host_key(request.headers.get(HOST_KEY_HEADER, ""), event.host_key_hash):
            raise HostAuthError()
        g.event = event
        return super().dispatch_request(*args, **kwargs)


class ParticipantLinkMixin(MethodView):
    """
    Resolves the <token> from a participant link into g.participant.
    """
    def dispatch_request(self, *args, **kwargs):
        g.participant = load_participant_from_token(kwargs["token"])
        return super().dispatch_request(*args, **kwargs)
