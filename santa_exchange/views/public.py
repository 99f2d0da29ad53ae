from __future__ import annotations

from flask import Blueprint, jsonify
from flask.views import MethodView
from flask_wtf.csrf import generate_csrf

from ..forms import CreateEventForm, JoinEventForm, validated
from ..notifications import send_welcome_email, status_link
from ..policies import load_event
from ..services.events import create_event, public_summary
from ..services.registration import register_participant


public_bp = Blueprint("public", __name__)


class LandingView(MethodView):
    def get(self):
        return jsonify({"service": "secret-santa", "status": "ok"})


class CsrfTokenView(MethodView):
    def get(self):
        return jsonify({"csrf_token": generate_csrf()})


class CreateEventView(MethodView):
    def post(self):
        form = validated(CreateEventForm())
        event, host_key = create_event(
            name=form.name.data,
            host_email=form.host_email.data,
            description=form.description.data,
            owner_id=form.owner_id.data,
        )
        data = public_summary(event)
        # The only time the host key is ever shown.
        data["host_key"] = host_key
        return jsonify({"success": True, "event": data}), 201


class EventView(MethodView):
    def get(self, event_id: int):
        return jsonify(public_summary(load_event(event_id)))


class JoinEventView(MethodView):
    def post(self, event_id: int):
        event = load_event(event_id)
        form = validated(JoinEventForm())
        p = register_participant(
            event,
            name=form.name.data,
            email=form.email.data,
            wishlist_q1=form.wishlist_q1.data,
            wishlist_q2=form.wishlist_q2.data,
        )
        welcome = send_welcome_email(p.id, event.id)
        return jsonify(
            {
                "success": True,
                "participant_id": p.id,
                "status_url": status_link(p),
                "warnings": [welcome.warning] if not welcome.ok else [],
            }
        ), 201


public_bp.add_url_rule("/", view_func=LandingView.as_view("landing"))
public_bp.add_url_rule("/api/csrf-token", view_func=CsrfTokenView.as_view("csrf_token"))
public_bp.add_url_rule("/api/events", view_func=CreateEventView.as_view("create_event"), methods=["POST"])
public_bp.add_url_rule("/api/events/<int:event_id>", view_func=EventView.as_view("event"))
public_bp.add_url_rule(
    "/api/events/<int:event_id>/participants",
    view_func=JoinEventView.as_view("join_event"),
    methods=["POST"],
)
