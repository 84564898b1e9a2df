"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from otp_verifier.api.router import router as otp_router
from otp_verifier.config import settings
from otp_verifier.services.delivery import build_delivery
from otp_verifier.verification.service import VerificationService

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    service = VerificationService.from_settings(settings, build_delivery(settings))
    service.start()
    app.state.verification_service = service
    logger.info(
        "Verification service ready (ttl=%ss, max_attempts=%d, delivery=%s)",
        settings.otp_ttl_seconds,
        settings.otp_max_attempts,
        settings.otp_delivery,
    )
    yield
    logger.info("Shutting down %s …", settings.app_name)
    await service.shutdown()


app = FastAPI(
    title=settings.app_name,
    description="One-time verification codes for registration and password reset",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(otp_router)


@app.get("/health")
async def health_check():
    """Simple liveness probe."""
    return {"status": "healthy", "app": settings.app_name}


def run() -> None:
    """Serve the app with uvicorn (``otp-verifier`` console script)."""
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="debug" if settings.debug else "info")
