"""Shared fixtures — controllable clock and a recording delivery channel."""

from __future__ import annotations

import pytest

from otp_verifier.services.delivery import DeliveryChannel


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingDelivery(DeliveryChannel):
    """Delivery channel that remembers every code it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send_code(self, identity: str, code: str) -> None:
        self.sent.append((identity, code))

    def last_code(self, identity: str) -> str:
        return [code for who, code in self.sent if who == identity][-1]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def delivery() -> RecordingDelivery:
    return RecordingDelivery()
