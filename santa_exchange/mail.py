"""Outbound email over SMTP.

With MAIL_SUPPRESS_SEND set (the default when no MAIL_SERVER is configured)
messages are appended to ``Mailer.outbox`` and logged instead of sent.
"""
from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage

from flask import Flask, current_app

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, app: Flask | None = None):
        self.outbox: list[EmailMessage] = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        app.extensions["mailer"] = self

    @staticmethod
    def build_message(to: str, subject: str, text: str, html: str | None = None) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = current_app.config["MAIL_DEFAULT_SENDER"]
        msg["To"] = to
        # Header values may not contain line breaks.
        msg["Subject"] = " ".join(subject.split())
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")
        return msg

    def send(self, msg: EmailMessage) -> None:
        """Deliver one message. Raises smtplib.SMTPException / OSError on failure."""
        cfg = current_app.config
        if cfg["MAIL_SUPPRESS_SEND"]:
            self.outbox.append(msg)
            logger.info("Mail suppressed: %r to %s", msg["Subject"], msg["To"])
            return

        host, port, timeout = cfg["MAIL_SERVER"], cfg["MAIL_PORT"], cfg["MAIL_TIMEOUT"]
        if cfg["MAIL_USE_SSL"]:
            server = smtplib.SMTP_SSL(host, port, timeout=timeout, context=ssl.create_default_context())
        else:
            server = smtplib.SMTP(host, port, timeout=timeout)
        with server:
            if not cfg["MAIL_USE_SSL"] and cfg["MAIL_USE_TLS"]:
                server.starttls(context=ssl.create_default_context())
            if cfg["MAIL_USERNAME"]:
                server.login(cfg["MAIL_USERNAME"], cfg["MAIL_PASSWORD"] or "")
            server.send_message(msg)
        logger.info("Mail sent: %r to %s", msg["Subject"], msg["To"])


def get_mailer() -> Mailer:
    return current_app.extensions["mailer"]
