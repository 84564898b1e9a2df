"""Tests for the OTP HTTP endpoints."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from otp_verifier.api.router import get_settings, get_verification_service
from otp_verifier.config import Settings
from otp_verifier.main import app, lifespan
from otp_verifier.verification.service import VerificationService

EMAIL = "alice@example.com"


@pytest.fixture
def service(clock, delivery) -> VerificationService:
    codes = iter(["482913", "739201", "555555"])
    return VerificationService(
        delivery, ttl=300, max_attempts=3, clock=clock, code_generator=lambda: next(codes)
    )


@pytest_asyncio.fixture
async def client(service):
    """HTTP client wired to a test-controlled verification service."""
    app.dependency_overrides[get_verification_service] = lambda: service
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


# ──────────────────────────────────────────────────────────
# POST /otp/send
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_send_then_cooldown(client, delivery):
    first = await client.post("/otp/send", json={"email": EMAIL})
    second = await client.post("/otp/send", json={"email": EMAIL})

    assert first.status_code == 200
    assert first.json()["success"] is True
    assert first.json()["status"] == "ok"
    assert first.json()["otp_id"].startswith("otp_")
    assert first.json()["message"] == f"OTP sent to {EMAIL}"

    assert second.status_code == 200
    assert second.json()["success"] is False
    assert second.json()["status"] == "cooldown"
    assert second.json()["otp_id"] is None
    assert delivery.sent == [(EMAIL, "482913")]


@pytest.mark.asyncio
async def test_send_rejects_empty_email(client):
    resp = await client.post("/otp/send", json={"email": ""})
    assert resp.status_code == 422


# ──────────────────────────────────────────────────────────
# POST /otp/verify
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_verify_flow(client):
    await client.post("/otp/send", json={"email": EMAIL})

    wrong = await client.post("/otp/verify", json={"email": EMAIL, "otp": "000000"})
    assert wrong.json() == {
        "success": False,
        "status": "invalid",
        "message": "Invalid OTP. 2 attempts remaining.",
        "verified": False,
        "remaining_attempts": 2,
    }

    right = await client.post("/otp/verify", json={"email": EMAIL, "otp": " 482913 "})
    assert right.json()["verified"] is True
    assert right.json()["status"] == "verified"

    again = await client.post("/otp/verify", json={"email": EMAIL, "otp": "482913"})
    assert again.json()["status"] == "not_found"
    assert again.json()["remaining_attempts"] is None


@pytest.mark.asyncio
async def test_verify_expired(client, clock):
    await client.post("/otp/send", json={"email": EMAIL})
    clock.advance(301)

    resp = await client.post("/otp/verify", json={"email": EMAIL, "otp": "482913"})

    assert resp.json()["status"] == "expired"
    assert resp.json()["message"] == "OTP has expired. Please request a new one."


@pytest.mark.asyncio
async def test_verify_locked(client):
    await client.post("/otp/send", json={"email": EMAIL})
    for _ in range(2):
        await client.post("/otp/verify", json={"email": EMAIL, "otp": "000000"})

    resp = await client.post("/otp/verify", json={"email": EMAIL, "otp": "000000"})

    assert resp.json()["status"] == "locked"
    assert resp.json()["verified"] is False


# ──────────────────────────────────────────────────────────
# POST /otp/resend
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_resend_replaces_code(client, delivery):
    await client.post("/otp/send", json={"email": EMAIL})
    resp = await client.post("/otp/resend", json={"email": EMAIL})

    assert resp.json()["success"] is True
    assert delivery.last_code(EMAIL) == "739201"

    ok = await client.post("/otp/verify", json={"email": EMAIL, "otp": "739201"})
    assert ok.json()["verified"] is True


# ──────────────────────────────────────────────────────────
# GET /otp/debug/{email}
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_debug_lookup_when_enabled(client):
    app.dependency_overrides[get_settings] = lambda: Settings(
        _env_file=None, otp_debug_endpoint=True
    )
    missing = await client.get(f"/otp/debug/{EMAIL}")
    await client.post("/otp/send", json={"email": EMAIL})
    found = await client.get(f"/otp/debug/{EMAIL}")

    assert missing.status_code == 404
    assert found.json() == {"email": EMAIL, "otp": "482913"}


@pytest.mark.asyncio
async def test_debug_lookup_hidden_by_default(client):
    defaults = Settings(_env_file=None)
    app.dependency_overrides[get_settings] = lambda: defaults
    await client.post("/otp/send", json={"email": EMAIL})

    resp = await client.get(f"/otp/debug/{EMAIL}")

    assert defaults.otp_debug_endpoint is False
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_debug_lookup_hidden_even_with_debug_logging(client):
    app.dependency_overrides[get_settings] = lambda: Settings(_env_file=None, debug=True)
    await client.post("/otp/send", json={"email": EMAIL})

    resp = await client.get(f"/otp/debug/{EMAIL}")

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.json()["status"] == "healthy"


# ──────────────────────────────────────────────────────────
# Application lifespan
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_lifespan_starts_and_stops_reaper():
    async with lifespan(app):
        service = app.state.verification_service
        assert isinstance(service, VerificationService)
        assert service.reaper.running

    assert not service.reaper.running
