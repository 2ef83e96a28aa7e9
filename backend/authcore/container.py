"""Build the session engine and application services from Flask config."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from flask import Flask, current_app

from authcore.infra.mail import LoggingDeliveryGateway, SmtpDeliveryGateway
from authcore.infra.security import WerkzeugPasswordHasher
from authcore.infra.sqlalchemy import SqlAlchemyUserStore
from authcore.services import DashboardService, IdentityService, SessionManager
from authcore.services._shared.ports import DeliveryGateway, LoggingAttemptObserver
from authcore.services.tokens import PurposeSecrets, TokenCodec, TokenIssuer, TokenTTLConfig

EXTENSION_KEY = "authcore"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Services:
    """Per-application service graph stored in ``app.extensions``."""

    session_manager: SessionManager
    identity: IdentityService
    dashboard: DashboardService
    issuer: TokenIssuer


def build_delivery(config: Mapping[str, Any]) -> DeliveryGateway:
    """
    Pick the delivery gateway for ``config``.

    ``SMTP_HOST`` selects the real relay. Without it, development sends to the
    local MailDev catcher (no TLS, no auth); anything else only logs links.
    """
    base_url = str(config.get("FRONTEND_BASE_URL", "http://localhost:4205"))
    sender = str(config.get("MAIL_FROM"))
    host = config.get("SMTP_HOST")
    if not host:
        maildev = config.get("MAILDEV_HOST")
        if maildev:
            port = int(config.get("MAILDEV_PORT", 1025))
            logger.info("SMTP_HOST not set; delivering to MailDev at %s:%s", maildev, port)
            return SmtpDeliveryGateway(
                host=str(maildev), port=port, security="none", sender=sender, base_url=base_url
            )
        logger.warning("SMTP_HOST not set; verification and reset links are only logged")
        return LoggingDeliveryGateway(base_url=base_url)
    return SmtpDeliveryGateway(
        host=str(host),
        port=int(config.get("SMTP_PORT", 587)),
        username=config.get("SMTP_USER"),
        password=config.get("SMTP_PASSWORD"),
        security=str(config.get("SMTP_SECURITY", "starttls")),
        sender=sender,
        base_url=base_url,
    )


def build_services(config: Mapping[str, Any]) -> Services:
    """Wire the store, hasher, issuer and delivery gateway into services."""
    store = SqlAlchemyUserStore()
    issuer = TokenIssuer(
        TokenCodec(),
        PurposeSecrets.from_config(config),
        TokenTTLConfig.from_config(config),
    )
    manager = SessionManager(
        store=store,
        hasher=WerkzeugPasswordHasher(str(config.get("PASSWORD_HASH_METHOD", "scrypt"))),
        issuer=issuer,
        delivery=build_delivery(config),
        require_verification=not bool(config.get("SKIP_EMAIL_VERIFICATION", False)),
        observer=LoggingAttemptObserver(),
    )
    return Services(
        session_manager=manager,
        identity=IdentityService(store, sessions=manager),
        dashboard=DashboardService(),
        issuer=issuer,
    )


def init_app(app: Flask) -> None:
    app.extensions[EXTENSION_KEY] = build_services(app.config)


def services() -> Services:
    """Return the service graph of the current application."""
    return current_app.extensions[EXTENSION_KEY]
