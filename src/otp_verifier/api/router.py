"""OTP API router — HTTP boundary for registration and password-reset flows.

Endpoints
---------
POST /otp/send            → issue a code (refused while one is still valid)
POST /otp/verify          → check a submitted code
POST /otp/resend          → replace the outstanding code unconditionally
GET  /otp/debug/{email}   → current code, only when ``otp_debug_endpoint`` is enabled
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from otp_verifier.config import Settings, settings
from otp_verifier.verification.service import VerificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/otp", tags=["otp"])


def get_verification_service(request: Request) -> VerificationService:
    """Return the service created by the application lifespan."""
    return request.app.state.verification_service


def get_settings() -> Settings:
    return settings


# ── Response / request models ────────────────────────────

class OTPSendRequest(BaseModel):
    email: str = Field(..., min_length=1)


class OTPSendResponse(BaseModel):
    success: bool
    status: str
    message: str
    otp_id: str | None = None


class OTPVerifyRequest(BaseModel):
    email: str = Field(..., min_length=1)
    otp: str = Field(..., min_length=1)


class OTPVerifyResponse(BaseModel):
    success: bool
    status: str
    message: str
    verified: bool
    remaining_attempts: int | None = None


class OTPDebugResponse(BaseModel):
    email: str
    otp: str


# ── Endpoints ────────────────────────────────────────────

@router.post("/send", response_model=OTPSendResponse)
async def send_otp(
    body: OTPSendRequest,
    service: VerificationService = Depends(get_verification_service),
):
    """Issue a verification code and hand it to the delivery channel."""
    result = await service.issue(body.email)
    return OTPSendResponse(
        success=result.ok,
        status=result.status.value,
        message=f"OTP sent to {body.email}" if result.ok else result.message,
        otp_id=result.otp_id,
    )


@router.post("/resend", response_model=OTPSendResponse)
async def resend_otp(
    body: OTPSendRequest,
    service: VerificationService = Depends(get_verification_service),
):
    """Discard any outstanding code and issue a new one."""
    result = await service.resend(body.email)
    return OTPSendResponse(
        success=True,
        status="ok",
        message=f"OTP sent to {body.email}",
        otp_id=result.otp_id,
    )


@router.post("/verify", response_model=OTPVerifyResponse)
async def verify_otp(
    body: OTPVerifyRequest,
    service: VerificationService = Depends(get_verification_service),
):
    """Validate a submitted code for the given email."""
    result = await service.verify(body.email, body.otp.strip())
    return OTPVerifyResponse(
        success=result.verified,
        status=result.status.value,
        message=result.message,
        verified=result.verified,
        remaining_attempts=result.remaining_attempts,
    )


@router.get("/debug/{email}", response_model=OTPDebugResponse)
async def debug_otp(
    email: str,
    service: VerificationService = Depends(get_verification_service),
    app_settings: Settings = Depends(get_settings),
):
    """Expose the active code for manual testing (opt-in, off by default)."""
    if not app_settings.otp_debug_endpoint:
        raise HTTPException(status_code=404, detail="Not found")

    code = service.peek(email)
    if code is None:
        raise HTTPException(status_code=404, detail="No active OTP for this email")

    logger.warning("Debug OTP lookup for %s", email)
    return OTPDebugResponse(email=email, otp=code)
