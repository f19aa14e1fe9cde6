"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from email_otp.api.router import router as otp_router
from email_otp.clock import Clock, SystemClock
from email_otp.config import Settings, settings
from email_otp.otp.generator import CodeGenerator
from email_otp.otp.janitor import Janitor
from email_otp.otp.store import OTPStore
from email_otp.services.email_service import EmailService, Notifier
from email_otp.services.otp_service import OTPOutcome, OTPService
from email_otp.services.rate_limiter import RateLimiter

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


def build_otp_service(
    config: Settings,
    notifier: Notifier | None = None,
    clock: Clock | None = None,
) -> OTPService:
    """Wire the store, generator, limiters and notifier from *config*."""
    return OTPService(
        store=OTPStore(clock or SystemClock()),
        generator=CodeGenerator(config.otp_length),
        notifier=notifier or EmailService(config),
        issue_limiter=RateLimiter(
            config.send_rate_limit,
            config.rate_limit_window_seconds,
            name="issue",
        ),
        verify_limiter=RateLimiter(
            config.verify_rate_limit,
            config.rate_limit_window_seconds,
            name="verify",
        ),
        ttl_seconds=config.otp_ttl_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", app.title)
    app.state.janitor.start()
    yield
    logger.info("Shutting down %s …", app.title)
    app.state.janitor.stop()


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Rejected malformed body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Malformed request body",
            "error": OTPOutcome.INVALID_INPUT.code,
        },
    )


def create_app(
    config: Settings | None = None, otp_service: OTPService | None = None
) -> FastAPI:
    config = config or settings
    service = otp_service or build_otp_service(config)

    app = FastAPI(
        title=config.app_name,
        description="One-time email verification codes",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.otp_service = service
    app.state.trusted_proxies = list(config.trusted_proxies)
    app.state.janitor = Janitor(
        service.store,
        interval_seconds=config.sweep_interval_seconds,
        limiters=(service.issue_limiter, service.verify_limiter),
    )

    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(otp_router)
    return app


app = create_app()
