# wrapntrack/routers/otp.py
from fastapi import APIRouter

from wrapntrack.schemas.otp import OtpResponse, OtpSendRequest, OtpVerifyRequest
from wrapntrack.services.otp_service import OtpService

router = APIRouter(prefix="/otp", tags=["OTP"])

service = OtpService.from_settings()


@router.post("/send-otp", response_model=OtpResponse)
def send_otp(payload: OtpSendRequest):
    """
    Email a fresh 6-digit code.

    - 400: missing or malformed email
    - 429: previous code was sent less than the cooldown ago
    """
    return OtpResponse(message=service.send(payload.email))


@router.post("/verify-otp", response_model=OtpResponse)
def verify_otp(payload: OtpVerifyRequest):
    """
    Consume the pending code for an email.

    - 400: wrong, expired or never-requested code
    - 429: too many attempts, request a new code
    """
    return OtpResponse(message=service.verify(payload.email, payload.code))
