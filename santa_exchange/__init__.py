from __future__ import annotations

import logging
import os
from flask import Flask, jsonify
from flask_wtf.csrf import CSRFError

from .errors import SantaError
from .extensions import db, migrate, csrf
from .mail import Mailer
from .pairing import DEFAULT_MAX_ATTEMPTS
from .views.host import host_bp
from .views.participant import participant_bp
from .views.public import public_bp


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _configure_logging(app: Flask) -> None:
    level = str(app.config["LOG_LEVEL"]).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger(__name__).setLevel(level)


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__)

    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", "sqlite:///secretsanta.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO")

    # Full reshuffles before the draw gives up on finding a derangement.
    app.config["DRAW_MAX_ATTEMPTS"] = int(os.environ.get("DRAW_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS))

    # Fernet key for participant links; derived from SECRET_KEY when empty.
    app.config["PARTICIPANT_TOKEN_KEY"] = os.environ.get("PARTICIPANT_TOKEN_KEY", "")

    # Links in emails point at the client app.
    app.config["PUBLIC_BASE_URL"] = os.environ.get("PUBLIC_BASE_URL", "")
    app.config["STATUS_LINK_PATH"] = os.environ.get("STATUS_LINK_PATH", "/event/{event_id}/waiting/{token}")
    app.config["CHAT_LINK_PATH"] = os.environ.get("CHAT_LINK_PATH", "/chat/{token}")

    mail_server = os.environ.get("MAIL_SERVER", "").strip()
    app.config["MAIL_SERVER"] = mail_server
    app.config["MAIL_PORT"] = int(os.environ.get("MAIL_PORT", "465"))
    app.config["MAIL_USE_SSL"] = _env_flag("MAIL_USE_SSL", True)
    app.config["MAIL_USE_TLS"] = _env_flag("MAIL_USE_TLS", False)
    app.config["MAIL_USERNAME"] = os.environ.get("MAIL_USERNAME", "")
    app.config["MAIL_PASSWORD"] = os.environ.get("MAIL_PASSWORD", "")
    app.config["MAIL_DEFAULT_SENDER"] = os.environ.get("MAIL_DEFAULT_SENDER", "Secret Santa <noreply@localhost>")
    app.config["MAIL_TIMEOUT"] = float(os.environ.get("MAIL_TIMEOUT", "10"))
    # Without a server, mail is logged and kept in the outbox instead.
    app.config["MAIL_SUPPRESS_SEND"] = _env_flag("MAIL_SUPPRESS_SEND", not mail_server)

    if test_config:
        app.config.update(test_config)

    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    Mailer(app)

    # Blueprints
    app.register_blueprint(public_bp)
    app.register_blueprint(host_bp)
    app.register_blueprint(participant_bp)

    @app.errorhandler(SantaError)
    def handle_santa_error(e: SantaError):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e: CSRFError):
        return jsonify({"success": False, "error": e.description}), 400

    return app
