"""Event lifecycle: the state an event is in and which host actions it allows.

    Registering --close--> RegistrationClosed --draw--> DrawComplete
         ^                        |                      |   ^
         +---------open-----------+                      +---+ re-draw

Registration can be toggled in every state without touching assignments.
``draw_completed`` only ever goes from false to true; a re-draw keeps it true.
"""
from __future__ import annotations

import enum

from .errors import DrawStateError, RegistrationClosed
from .models import Event


class EventState(enum.Enum):
    REGISTERING = "registering"
    REGISTRATION_CLOSED = "registration_closed"
    DRAW_COMPLETE = "draw_complete"


def state_of(event: Event) -> EventState:
    if event.draw_completed:
        return EventState.DRAW_COMPLETE
    if event.registration_open:
        return EventState.REGISTERING
    return EventState.REGISTRATION_CLOSED


def ensure_can_register(event: Event) -> None:
    if not event.registration_open:
        raise RegistrationClosed()


def ensure_can_draw(event: Event) -> None:
    if state_of(event) is EventState.DRAW_COMPLETE:
        raise DrawStateError("The draw has already been run. Use re-draw to pair everyone again.")


def ensure_can_redraw(event: Event) -> None:
    if state_of(event) is not EventState.DRAW_COMPLETE:
        raise DrawStateError("The draw has not been run yet, so there is nothing to re-draw.")


def set_registration_open(event: Event, is_open: bool) -> EventState:
    """Toggle registration. Never touches draw_completed or assignments."""
    event.registration_open = bool(is_open)
    return state_of(event)
