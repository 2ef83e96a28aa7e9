"""Verification and reset links delivered over SMTP."""

from __future__ import annotations

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import urlencode

from authcore.services._shared.ports.delivery_gateway import DeliveryGateway

logger = logging.getLogger(__name__)

VERIFY_PATH = "/verify-email"
RESET_PATH = "/reset-password"
SECURITY_MODES = ("starttls", "ssl", "none")


def build_link(base_url: str, path: str, token: str) -> str:
    """Return ``<base_url><path>?token=<token>`` with the token URL-encoded."""
    return f"{base_url.rstrip('/')}{path}?{urlencode({'token': token})}"


def redact_email(email: str) -> str:
    """Redact an address for logging: ``al***@example.com``."""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class SmtpDeliveryGateway(DeliveryGateway):
    """
    Send multipart (text + HTML) messages through an SMTP relay.

    Errors propagate to the caller, which logs them without failing its flow.

    :param host: SMTP server.
    :param port: SMTP port (587 for STARTTLS, 465 for implicit TLS).
    :param username: Optional login.
    :param password: Optional password.
    :param security: ``"starttls"`` upgrades a plain connection, ``"ssl"`` uses
        implicit TLS (``SMTP_SSL``), ``"none"`` sends in clear text (local
        catchers such as MailDev).
    :param sender: ``From`` header.
    :param base_url: Frontend origin used to build links.
    :param timeout: Socket timeout in seconds.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        security: str = "starttls",
        sender: str,
        base_url: str,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        if security not in SECURITY_MODES:
            raise ValueError(f"Unknown SMTP security mode: {security!r}")
        self.security = security
        self.sender = sender
        self.base_url = base_url
        self.timeout = timeout

    # ------------------------------------------------------------------ #

    def _compose(self, to_email: str, subject: str, text_body: str, html_body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def _send(self, to_email: str, msg: MIMEMultipart) -> None:
        context = ssl.create_default_context()
        if self.security == "ssl":
            server: smtplib.SMTP = smtplib.SMTP_SSL(
                self.host, self.port, context=context, timeout=self.timeout
            )
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        with server:
            if self.security == "starttls":
                server.starttls(context=context)
            if self.username and self.password:
                server.login(self.username, self.password)
            server.sendmail(self.sender, [to_email], msg.as_string())
        logger.info("mail.sent to=%s subject=%s", redact_email(to_email), msg["Subject"])

    # ------------------------------------------------------------------ #

    def send_verification_link(self, email: str, token: str) -> None:
        link = build_link(self.base_url, VERIFY_PATH, token)
        text = (
            "Welcome!\n\n"
            f"Confirm your email address by opening this link:\n{link}\n\n"
            "If you did not create an account you can ignore this message."
        )
        html = (
            "<p>Welcome!</p>"
            f'<p>Confirm your email address: <a href="{link}">verify email</a></p>'
            "<p>If you did not create an account you can ignore this message.</p>"
        )
        self._send(email, self._compose(email, "Verify your email address", text, html))

    def send_reset_link(self, email: str, token: str) -> None:
        link = build_link(self.base_url, RESET_PATH, token)
        text = (
            "A password reset was requested for your account.\n\n"
            f"Choose a new password here:\n{link}\n\n"
            "If you did not request this you can ignore this message."
        )
        html = (
            "<p>A password reset was requested for your account.</p>"
            f'<p><a href="{link}">Choose a new password</a></p>'
            "<p>If you did not request this you can ignore this message.</p>"
        )
        self._send(email, self._compose(email, "Reset your password", text, html))
