"""Verification service — issue, verify and resend one-time codes."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from otp_verifier.services.delivery import DeliveryChannel
from otp_verifier.verification.codes import DEFAULT_CODE_LENGTH, generate_code
from otp_verifier.verification.reaper import Reaper
from otp_verifier.verification.records import RecordStore, VerificationRecord
from otp_verifier.verification.results import (
    IssueResult,
    IssueStatus,
    ResendResult,
    VerifyResult,
    VerifyStatus,
)

if TYPE_CHECKING:
    from otp_verifier.config import Settings

logger = logging.getLogger(__name__)

# Defaults: 5-minute codes, 3 tries, sweep once a minute
DEFAULT_TTL_SECONDS = 300.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


class VerificationService:
    """Time-boxed, attempt-limited one-time code store.

    At most one code is outstanding per identity.  :pymethod:`issue`
    refuses while a valid code exists; :pymethod:`resend` replaces it
    unconditionally.  Every read-check-write sequence runs inside a single
    store critical section, and no ``await`` happens while the lock is held.

    The owned :class:`Reaper` is started with :pymethod:`start` (or
    ``async with``) and must be stopped with :pymethod:`shutdown`.
    """

    def __init__(
        self,
        delivery: DeliveryChannel,
        *,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        code_length: int = DEFAULT_CODE_LENGTH,
        clock: Callable[[], float] = time.monotonic,
        code_generator: Callable[[], str] | None = None,
    ) -> None:
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        if code_length < 1:
            raise ValueError(f"code_length must be at least 1, got {code_length}")

        self._delivery = delivery
        self._ttl = ttl
        self._max_attempts = max_attempts
        self._clock = clock
        self._generate = code_generator or (lambda: generate_code(code_length))
        self._store = RecordStore()
        self._reaper = Reaper(self._store, clock, sweep_interval)

    @classmethod
    def from_settings(
        cls, settings: Settings, delivery: DeliveryChannel, **overrides: Any
    ) -> VerificationService:
        """Build a service from application settings."""
        options: dict[str, Any] = {
            "ttl": settings.otp_ttl_seconds,
            "max_attempts": settings.otp_max_attempts,
            "sweep_interval": settings.otp_sweep_interval_seconds,
            "code_length": settings.otp_code_length,
        }
        options.update(overrides)
        return cls(delivery, **options)

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def reaper(self) -> Reaper:
        return self._reaper

    # ── Lifecycle ────────────────────────────────────────

    def start(self) -> None:
        """Start the background reaper on the running event loop."""
        self._reaper.start()

    async def shutdown(self) -> None:
        """Stop the background reaper and wait for it to exit."""
        await self._reaper.stop()

    async def __aenter__(self) -> VerificationService:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    # ── Operations ───────────────────────────────────────

    async def issue(self, identity: str) -> IssueResult:
        """Issue a code for *identity* unless a valid one is outstanding."""
        with self._store.locked():
            existing = self._store.get(identity)
            if existing is not None and existing.expires_at > self._clock():
                logger.info("OTP issue refused for %s: cooldown active", identity)
                return IssueResult(IssueStatus.COOLDOWN)
            record = self._install(identity)

        logger.info("OTP %s issued for %s", record.otp_id, identity)
        await self._delivery.send_code(identity, record.code)
        return IssueResult(IssueStatus.OK, record.otp_id)

    async def resend(self, identity: str) -> ResendResult:
        """Replace any code for *identity* with a fresh one, ignoring cooldown.

        Delivery runs after the store lock is released, so when ``issue``
        and ``resend`` race for one identity the superseded code's message
        may arrive after the fresh one.  Only the stored code verifies.
        """
        with self._store.locked():
            self._store.delete(identity)
            record = self._install(identity)

        logger.info("OTP %s re-issued for %s", record.otp_id, identity)
        await self._delivery.send_code(identity, record.code)
        return ResendResult(record.otp_id)

    async def verify(self, identity: str, code: str) -> VerifyResult:
        """Check *code* against the outstanding record for *identity*.

        Successful, expired and locked records are removed, so each code
        verifies at most once.
        """
        with self._store.locked():
            result = self._check(identity, code)

        if result.status is VerifyStatus.INVALID:
            logger.info(
                "Invalid OTP for %s (%d attempts remaining)",
                identity,
                result.remaining_attempts,
            )
        else:
            logger.info("OTP verification for %s: %s", identity, result.status.value)
        return result

    def peek(self, identity: str) -> str | None:
        """Return the active code for *identity* (development helper)."""
        record = self._store.get(identity)
        if record is None or record.is_expired(self._clock()):
            return None
        return record.code

    # ── Private helpers ──────────────────────────────────

    def _install(self, identity: str) -> VerificationRecord:
        """Generate a code and store it.  Caller must hold the store lock."""
        record = VerificationRecord(
            code=self._generate(),
            expires_at=self._clock() + self._ttl,
            otp_id=f"otp_{uuid4().hex}",
        )
        self._store.put(identity, record)
        return record

    def _check(self, identity: str, code: str) -> VerifyResult:
        """Verification state machine.  Caller must hold the store lock."""
        record = self._store.get(identity)
        if record is None:
            return VerifyResult(VerifyStatus.NOT_FOUND)

        if record.is_expired(self._clock()):
            self._store.delete(identity)
            return VerifyResult(VerifyStatus.EXPIRED)

        if record.attempts >= self._max_attempts:
            self._store.delete(identity)
            return VerifyResult(VerifyStatus.LOCKED)

        if secrets.compare_digest(code.encode(), record.code.encode()):
            # Consume on success
            self._store.delete(identity)
            return VerifyResult(VerifyStatus.VERIFIED)

        record.attempts += 1
        if record.attempts >= self._max_attempts:
            self._store.delete(identity)
            return VerifyResult(VerifyStatus.LOCKED)

        self._store.put(identity, record)
        return VerifyResult.invalid(self._max_attempts - record.attempts)
