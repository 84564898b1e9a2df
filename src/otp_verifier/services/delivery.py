"""Delivery channels — hand a freshly issued code to the user."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from otp_verifier.config import Settings

logger = logging.getLogger(__name__)


class DeliveryChannel(ABC):
    """Abstract transport for verification codes.

    Delivery is fire-and-forget from the verification service's point of
    view: implementations log their own failures instead of raising.
    """

    @abstractmethod
    async def send_code(self, identity: str, code: str) -> None:
        """Transmit *code* to the owner of *identity*."""


class LoggingDelivery(DeliveryChannel):
    """Development channel — writes the code to the application log."""

    async def send_code(self, identity: str, code: str) -> None:
        # In a real deployment this would be an email/SMS; here we log it for testing
        logger.info("📧 OTP for %s: %s", identity, code)


def build_delivery(settings: Settings) -> DeliveryChannel:
    """Pick the delivery channel named by ``settings.otp_delivery``."""
    if settings.otp_delivery == "email":
        from otp_verifier.services.email_service import EmailService

        return EmailService(settings)
    return LoggingDelivery()
