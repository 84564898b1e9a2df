"""Tagged outcomes returned by the verification service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class IssueStatus(str, Enum):
    OK = "ok"
    COOLDOWN = "cooldown"


class VerifyStatus(str, Enum):
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    INVALID = "invalid"
    LOCKED = "locked"


_VERIFY_MESSAGES = {
    VerifyStatus.VERIFIED: "OTP verified successfully",
    VerifyStatus.NOT_FOUND: "No OTP found for this email. Please request a new one.",
    VerifyStatus.EXPIRED: "OTP has expired. Please request a new one.",
    VerifyStatus.LOCKED: "Too many failed attempts. Please request a new OTP.",
}


@dataclass(frozen=True)
class IssueResult:
    status: IssueStatus
    otp_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is IssueStatus.OK

    @property
    def message(self) -> str:
        if self.ok:
            return "OTP sent"
        return "OTP already sent. Please wait before requesting a new one."


@dataclass(frozen=True)
class ResendResult:
    """Resend always succeeds; it carries the new issuance id."""

    otp_id: str

    @property
    def ok(self) -> bool:
        return True

    @property
    def message(self) -> str:
        return "OTP resent"


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of a verification check.

    ``remaining_attempts`` is only set for :attr:`VerifyStatus.INVALID`.
    Callers should offer a retry for ``INVALID`` and ask for a new code
    for ``NOT_FOUND``, ``EXPIRED`` and ``LOCKED``.
    """

    status: VerifyStatus
    remaining_attempts: int | None = None

    @classmethod
    def invalid(cls, remaining_attempts: int) -> VerifyResult:
        return cls(VerifyStatus.INVALID, remaining_attempts)

    @property
    def verified(self) -> bool:
        return self.status is VerifyStatus.VERIFIED

    @property
    def needs_new_code(self) -> bool:
        return self.status in (
            VerifyStatus.NOT_FOUND,
            VerifyStatus.EXPIRED,
            VerifyStatus.LOCKED,
        )

    @property
    def message(self) -> str:
        if self.status is VerifyStatus.INVALID:
            return f"Invalid OTP. {self.remaining_attempts} attempts remaining."
        return _VERIFY_MESSAGES[self.status]
