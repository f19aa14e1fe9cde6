"""OTP API router — JSON endpoints for sending and verifying codes.

Endpoints
---------
POST /api/send-otp      → issue a code unless one is pending
POST /api/resend-otp    → issue a fresh code, replacing any pending one
POST /api/verify-otp    → check a submitted code (single use)
GET  /api/health        → liveness check
"""

from __future__ import annotations

import ipaddress
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from email_otp.services.otp_service import OTPResult, OTPService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["otp"])


# ── Request / response models ────────────────────────────

class SendOTPRequest(BaseModel):
    email: str | None = None


class VerifyOTPRequest(BaseModel):
    email: str | None = None
    otp: str | int | None = None


class OTPResponse(BaseModel):
    success: bool
    message: str
    error: str | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str


# ── Dependencies ─────────────────────────────────────────

def get_otp_service(request: Request) -> OTPService:
    return request.app.state.otp_service


def client_key(request: Request) -> str:
    """Rate-limit identity for *request*.

    The socket peer is used unless it is one of the configured trusted proxies,
    in which case the right-most ``X-Forwarded-For`` hop that is not itself
    a trusted proxy is taken. Headers from untrusted peers are ignored.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = set(request.app.state.trusted_proxies)
    if peer not in trusted:
        return peer

    forwarded = request.headers.get("x-forwarded-for", "")
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop in trusted:
            continue
        try:
            ipaddress.ip_address(hop)
        except ValueError:
            logger.warning("Ignoring malformed X-Forwarded-For hop %r", hop)
            break
        return hop
    return peer


def _to_response(result: OTPResult) -> JSONResponse:
    body = OTPResponse(
        success=result.success,
        message=result.message,
        error=None if result.success else result.outcome.code,
    )
    headers = {}
    if result.retry_after is not None:
        headers["Retry-After"] = str(result.retry_after)
    return JSONResponse(
        status_code=result.outcome.status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


# ── Endpoints ────────────────────────────────────────────

@router.post("/send-otp", response_model=OTPResponse)
async def send_otp(
    body: SendOTPRequest,
    request: Request,
    service: OTPService = Depends(get_otp_service),
):
    """Email a new code to ``body.email``."""
    result = await service.issue(body.email, client_key(request))
    return _to_response(result)


@router.post("/resend-otp", response_model=OTPResponse)
async def resend_otp(
    body: SendOTPRequest,
    request: Request,
    service: OTPService = Depends(get_otp_service),
):
    """Email a fresh code, invalidating any pending one."""
    result = await service.reissue(body.email, client_key(request))
    return _to_response(result)


@router.post("/verify-otp", response_model=OTPResponse)
async def verify_otp(
    body: VerifyOTPRequest,
    request: Request,
    service: OTPService = Depends(get_otp_service),
):
    """Validate a submitted code for ``body.email``."""
    otp = body.otp
    if isinstance(otp, int):
        # JSON numbers lose leading zeros
        otp = str(otp).zfill(service.code_length)
    result = await service.verify(body.email, otp, client_key(request))
    return _to_response(result)


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Simple liveness check."""
    return HealthResponse(status="OK", timestamp=datetime.now(UTC).isoformat())
