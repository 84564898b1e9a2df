"""Email delivery channel — sends verification codes via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from otp_verifier.config import Settings
from otp_verifier.services.delivery import DeliveryChannel

logger = logging.getLogger(__name__)


class EmailService(DeliveryChannel):
    """Sends verification codes using the configured SMTP server."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def build_message(self, to_email: str, code: str) -> EmailMessage:
        """Compose the verification email for *to_email*."""
        app_name = self._settings.app_name
        minutes = max(1, round(self._settings.otp_ttl_seconds / 60))
        body = (
            "Hello,\n\n"
            f"Your {app_name} verification code is: {code}\n\n"
            f"The code expires in {minutes} minute(s) and can only be used once.\n\n"
            "If you did not request this code, you can safely ignore this email.\n\n"
            "Best regards,\n"
            f"The {app_name} Team"
        )

        msg = EmailMessage()
        msg["Subject"] = f"Your verification code — {app_name}"
        msg["From"] = self._settings.email_from
        msg["To"] = to_email
        msg.set_content(body)
        return msg

    async def send_code(self, identity: str, code: str) -> None:
        """Email *code* to *identity*.

        SMTP errors are logged and swallowed; the caller has already
        committed the code and does not model delivery failure.
        """
        msg = self.build_message(identity, code)
        logger.info("Sending verification email to %s", identity)

        try:
            await aiosmtplib.send(
                msg,
                hostname=self._settings.smtp_host,
                port=self._settings.smtp_port,
                username=self._settings.smtp_username or None,
                password=self._settings.smtp_password or None,
                start_tls=True,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.exception("Verification email to %s failed: %s", identity, exc)
            return

        logger.info("Verification email sent to %s", identity)
