"""Outbound SMTP mail transport.

The transport is built once per application, health-checked at startup and
stored in ``app.extensions["mailer"]``. Services receive it explicitly instead
of reaching for module state.
"""

from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape
from logging import Logger, getLogger
from typing import Mapping

from flask import Flask

from .errors import MailDeliveryError

EXTENSION_KEY = "mailer"


@dataclass
class OutgoingMessage:
    """A rendered email ready for the transport."""

    to: str
    subject: str
    text: str
    html: str


class Mailer:
    """Send plain-text/HTML emails over SMTP."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        from_email: str | None = None,
        sender_name: str = "New Moon Gym Plus",
        *,
        production: bool = False,
        suppress_send: bool = False,
        logger: Logger | None = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.sender_name = sender_name
        self.production = production
        self.suppress_send = suppress_send
        self.logger = logger or getLogger(__name__)
        self.verified = False
        self.outbox: list[OutgoingMessage] = []

    @classmethod
    def from_config(cls, config: Mapping, logger: Logger | None = None) -> "Mailer":
        return cls(
            host=config.get("SMTP_HOST", "localhost"),
            port=int(config.get("SMTP_PORT", 587)),
            username=config.get("SMTP_USER"),
            password=config.get("SMTP_PASS"),
            from_email=config.get("FROM_EMAIL"),
            sender_name=config.get("MAIL_SENDER_NAME", "New Moon Gym Plus"),
            production=config.get("APP_ENV") == "production",
            suppress_send=bool(config.get("MAIL_SUPPRESS_SEND")),
            logger=logger,
        )

    def init_app(self, app: Flask) -> None:
        """Run the startup health check and register the mailer on ``app``."""

        self.logger = app.logger
        self.verify_connection()
        app.extensions[EXTENSION_KEY] = self

    def _connect(self) -> smtplib.SMTP:
        if self.port == 465:
            server: smtplib.SMTP = smtplib.SMTP_SSL(self.host, self.port, timeout=10)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=10)
            server.starttls()
        if self.username and self.password:
            server.login(self.username, self.password)
        return server

    def verify_connection(self) -> bool:
        """Check that the SMTP server accepts our credentials."""

        if self.suppress_send:
            self.verified = True
            return True
        if not self.username:
            self.logger.warning("SMTP_USER is not configured; email delivery disabled.")
            self.verified = False
            return False

        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError):
            self.logger.exception("SMTP verification failed for %s:%s", self.host, self.port)
            self.verified = False
        else:
            self.logger.info("SMTP connection verified for %s:%s", self.host, self.port)
            self.verified = True
        return self.verified

    def send(self, message: OutgoingMessage) -> None:
        """Deliver ``message``; failures only propagate in production."""

        try:
            self._deliver(message)
        except (MailDeliveryError, smtplib.SMTPException, OSError) as error:
            self.logger.error("Failed to send %r to %s: %s", message.subject, message.to, error)
            if self.production:
                if isinstance(error, MailDeliveryError):
                    raise
                raise MailDeliveryError("Email delivery failed.") from error
            self.logger.warning("Email failed outside production; continuing.")

    def _deliver(self, message: OutgoingMessage) -> None:
        if self.suppress_send:
            self.outbox.append(message)
            return
        # Retry the startup check until the transport comes up.
        if not self.verified and not self.verify_connection() and self.production:
            raise MailDeliveryError("SMTP connection not verified.")
        if not self.from_email:
            raise MailDeliveryError("FROM_EMAIL or SMTP_USER must be configured.")

        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = formataddr((self.sender_name, self.from_email))
        mime["To"] = message.to
        mime.attach(MIMEText(message.text, "plain"))
        mime.attach(MIMEText(message.html, "html"))

        with self._connect() as server:
            server.sendmail(self.from_email, [message.to], mime.as_string())

    def send_welcome_email(self, to: str, user_name: str, code: str) -> None:
        greeting = f"Welcome to {self.sender_name}, {user_name}!"
        text = (
            f"{greeting}\n\n"
            f"Your verification code is {code}. It expires in 24 hours."
        )
        html = (
            f"<p>{escape(greeting)}</p>"
            f"<p>Your verification code is <strong>{escape(code)}</strong>."
            " It expires in 24 hours.</p>"
        )
        self.send(OutgoingMessage(to=to, subject=greeting, text=text, html=html))

    def send_password_reset_email(self, to: str, reset_link: str) -> None:
        text = f"Use the link below to reset your password:\n\n{reset_link}"
        html = (
            "<p>Use the link below to reset your password:</p>"
            f'<p><a href="{escape(reset_link)}">Reset Password</a></p>'
        )
        self.send(
            OutgoingMessage(to=to, subject="Reset Your Password", text=text, html=html)
        )
