from __future__ import annotations

from .logging_delivery_gateway import LoggingDeliveryGateway
from .smtp_delivery_gateway import SmtpDeliveryGateway, build_link, redact_email

__all__ = ["LoggingDeliveryGateway", "SmtpDeliveryGateway", "build_link", "redact_email"]
