"""
Outgoing email over SMTP via fastapi-mail.

Connection details come from the ``MAIL_*`` settings.
"""

from __future__ import annotations

import logging

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from config.settings import config

logger = logging.getLogger(__name__)


def get_mail_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=config.mail_username,
        MAIL_PASSWORD=config.mail_password,
        MAIL_FROM=config.mail_from,
        MAIL_FROM_NAME=config.mail_from_name,
        MAIL_PORT=config.mail_port,
        MAIL_SERVER=config.mail_server,
        MAIL_STARTTLS=config.mail_starttls,
        MAIL_SSL_TLS=config.mail_ssl_tls,
        USE_CREDENTIALS=bool(config.mail_username),
        VALIDATE_CERTS=True,
        SUPPRESS_SEND=int(config.mail_suppress_send),
    )


async def send_email(email: str, subject: str, message: str) -> None:
    """Send a plain-text email. Delivery errors propagate to the caller."""
    mail = MessageSchema(
        subject=subject,
        recipients=[email],
        body=message,
        subtype=MessageType.plain,
    )
    await FastMail(get_mail_config()).send_message(mail)
    logger.info("Sent email %r to %s", subject, email)
