"""Email sending via SMTP.

With smtp_enabled off (the default for local development) messages are
logged instead of sent, so verification and reset tokens can be copied from
the console.
"""

import logging
from email.message import EmailMessage

import aiosmtplib

from picklebook.core.config import settings

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, body: str) -> None:
    """Send a plain-text email via SMTP."""
    if not settings.smtp_enabled:
        logger.info("SMTP disabled, not sending %r to %s:\n%s", subject, to, body)
        return

    message = EmailMessage()
    message["From"] = settings.smtp_from
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    await aiosmtplib.send(message, hostname=settings.smtp_host, port=settings.smtp_port)


async def send_verification_email(to: str, token: str) -> None:
    link = f"{settings.frontend_url}/verify-email?email={to}&token={token}"
    body = (
        f"Welcome to {settings.app_name}!\n\n"
        f"Verification code: {token}\n"
        f"Or confirm your address here: {link}\n"
    )
    await send_email(to, f"Verify your {settings.app_name} email", body)
    logger.info("Verification email sent to %s", to)


async def send_password_reset_email(to: str, token: str) -> None:
    """Send the password reset email with the reset link."""
    link = f"{settings.frontend_url}/auth/reset-password?email={to}&token={token}"
    body = (
        f"Someone asked to reset the password on your {settings.app_name} account.\n\n"
        f"Reset code: {token}\n"
        f"Or open: {link}\n\n"
        f"No action is needed if this wasn't you.\n"
    )
    await send_email(to, f"Reset your {settings.app_name} password", body)
    logger.info("Password reset email sent to %s", to)
