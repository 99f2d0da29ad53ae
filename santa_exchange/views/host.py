from __future__ import annotations

from flask import Blueprint, g, jsonify

from ..errors import ValidationError
from ..forms import RedrawForm
from ..policies import HostRequiredMixin
from ..services.assignments import rerun_draw, run_draw
from ..services.events import host_dashboard, toggle_registration

host_bp = Blueprint("host", __name__, url_prefix="/api/events/<int:event_id>")


class DashboardView(HostRequiredMixin):
    def get(self, event_id: int):
        return jsonify(host_dashboard(g.event))


class OpenRegistrationView(HostRequiredMixin):
    def post(self, event_id: int):
        state = toggle_registration(g.event, True)
        return jsonify({"success": True, "registration_open": True, "state": state.value})


class CloseRegistrationView(HostRequiredMixin):
    def post(self, event_id: int):
        state = toggle_registration(g.event, False)
        return jsonify({"success": True, "registration_open": False, "state": state.value})


class RunDrawView(HostRequiredMixin):
    def post(self, event_id: int):
        outcome = run_draw(g.event)
        return jsonify(outcome.to_dict())


class RedrawView(HostRequiredMixin):
    """Destructive: the client must send confirm=true after asking the host."""
    def post(self, event_id: int):
        form = RedrawForm()
        if not form.validate_on_submit() or not form.confirm.data:
            raise ValidationError(
                "Re-draw replaces every pairing and deletes all messages. Send confirm=true to proceed.",
                fields=form.errors or {"confirm": ["Confirmation required."]},
            )
        outcome = rerun_draw(g.event)
        return jsonify(outcome.to_dict())


host_bp.add_url_rule("/dashboard", view_func=DashboardView.as_view("dashboard"))
host_bp.add_url_rule("/registration/open", view_func=OpenRegistrationView.as_view("open_registration"), methods=["POST"])
host_bp.add_url_rule("/registration/close", view_func=CloseRegistrationView.as_view("close_registration"), methods=["POST"])
host_bp.add_url_rule("/draw", view_func=RunDrawView.as_view("run_draw"), methods=["POST"])
host_bp.add_url_rule("/redraw", view_func=RedrawView.as_view("redraw"), methods=["POST"])
