"""Development delivery: log the link instead of sending mail."""

from __future__ import annotations

import logging

from authcore.infra.mail.smtp_delivery_gateway import (
    RESET_PATH,
    VERIFY_PATH,
    build_link,
    redact_email,
)
from authcore.services._shared.ports.delivery_gateway import DeliveryGateway

logger = logging.getLogger(__name__)


class LoggingDeliveryGateway(DeliveryGateway):
    """
    Used when ``SMTP_HOST`` is unset.

    Only the path is logged; tokens never reach log output.
    """

    def __init__(self, *, base_url: str) -> None:
        self.base_url = base_url

    def send_verification_link(self, email: str, token: str) -> None:
        logger.info(
            "mail.dev verification link for %s -> %s",
            redact_email(email),
            build_link(self.base_url, VERIFY_PATH, "<token>"),
        )

    def send_reset_link(self, email: str, token: str) -> None:
        logger.info(
            "mail.dev reset link for %s -> %s",
            redact_email(email),
            build_link(self.base_url, RESET_PATH, "<token>"),
        )
