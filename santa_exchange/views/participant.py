from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from ..errors import NotFound, ValidationError
from ..forms import MessageForm, validated
from ..policies import ParticipantLinkMixin
from ..services.assignments import assignment_for, participant_status
from ..services.messages import TO_RECEIVER, TO_SANTA, conversation, send_message, serialize_message

participant_bp = Blueprint("participant", __name__, url_prefix="/api/p/<token>")


class StatusView(ParticipantLinkMixin):
    def get(self, token: str):
        return jsonify(participant_status(g.participant))


class AssignmentView(ParticipantLinkMixin):
    def get(self, token: str):
        match = assignment_for(g.participant)
        if match is None:
            raise NotFound("The draw hasn't reached you yet. Check back soon.")
        receiver = match.receiver
        return jsonify(
            {
                "receiver": {
                    "name": receiver.name,
                    "wishlist_q1": receiver.wishlist_q1,
                    "wishlist_q2": receiver.wishlist_q2,
                }
            }
        )


class MessagesView(ParticipantLinkMixin):
    def get(self, token: str):
        counterpart = request.args.get("with", TO_RECEIVER)
        if counterpart not in (TO_RECEIVER, TO_SANTA):
            raise ValidationError("with must be 'receiver' or 'santa'.")
        return jsonify(conversation(g.participant, counterpart))

    def post(self, token: str):
        form = validated(MessageForm())
        message, notification = send_message(g.participant, form.content.data, to=form.to.data)
        return jsonify(
            {
                "success": True,
                "message": serialize_message(message, g.participant),
                "warnings": [notification.warning] if not notification.ok else [],
            }
        ), 201


participant_bp.add_url_rule("/status", view_func=StatusView.as_view("status"))
participant_bp.add_url_rule("/assignment", view_func=AssignmentView.as_view("assignment"))
participant_bp.add_url_rule("/messages", view_func=MessagesView.as_view("messages"), methods=["GET", "POST"])
