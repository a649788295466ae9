# wrapntrack/storefront/otp_gate.py
import enum
import logging
import re
from typing import Callable, TypeVar

from pydantic import BaseModel

from wrapntrack.storefront.api_client import ApiClient, ApiError
from wrapntrack.storefront.cooldown import Cooldown

logger = logging.getLogger(__name__)

RESEND_COOLDOWN_SECONDS = 30
CODE_PATTERN = re.compile(r"^\d{6}$")

T = TypeVar("T")


class OtpOutcome(str, enum.Enum):
    SENT = "sent"
    VERIFIED = "verified"
    INVALID_CODE = "invalid_code"      # 400 on verify, or not 6 digits
    BAD_REQUEST = "bad_request"        # 400 on send (bad email)
    RATE_LIMITED = "rate_limited"      # 429
    COOLDOWN = "cooldown"              # resend refused locally
    NO_EMAIL = "no_email"
    SERVER_ERROR = "server_error"


class OtpResult(BaseModel):
    outcome: OtpOutcome
    message: str

    @property
    def success(self) -> bool:
        return self.outcome in (OtpOutcome.SENT, OtpOutcome.VERIFIED)


class OtpGate:
    """
    Email one-time-password checkpoint in front of order persistence.

    The gate owns one Cooldown: every successful send restarts it, and
    resend_otp() refuses to call the server while it is running. The
    server stays authoritative for expiry and attempt limits.
    """

    def __init__(self, api: ApiClient, cooldown: Cooldown | None = None):
        self.api = api
        self.cooldown = cooldown or Cooldown(RESEND_COOLDOWN_SECONDS)
        self.email: str | None = None

    def send_otp(self, email: str | None) -> OtpResult:
        if not email:
            return OtpResult(
                outcome=OtpOutcome.NO_EMAIL,
                message="No email on file. Please update your profile and resend.",
            )
        self.email = email
        try:
            self.api.post("/api/otp/send-otp", json={"email": email})
        except ApiError as exc:
            if exc.status_code == 429:
                return OtpResult(
                    outcome=OtpOutcome.RATE_LIMITED,
                    message=exc.message or "Too many requests. Please wait before resending.",
                )
            if exc.status_code == 400:
                return OtpResult(
                    outcome=OtpOutcome.BAD_REQUEST,
                    message=exc.message or "Invalid email address.",
                )
            logger.warning("OTP send failed: %s", exc)
            return OtpResult(
                outcome=OtpOutcome.SERVER_ERROR,
                message="Server error, please try again later.",
            )

        self.cooldown.start()
        return OtpResult(outcome=OtpOutcome.SENT, message=f"Verification code sent to {email}")

    def resend_otp(self) -> OtpResult:
        if self.cooldown.is_active:
            return OtpResult(
                outcome=OtpOutcome.COOLDOWN,
                message=f"Please wait {self.cooldown.remaining}s before resending",
            )
        return self.send_otp(self.email)

    def verify_otp(self, email: str | None, code: str) -> OtpResult:
        code = (code or "").strip()
        if not CODE_PATTERN.match(code):
            return OtpResult(
                outcome=OtpOutcome.INVALID_CODE,
                message="Enter the 6-digit code from your email.",
            )
        if not email:
            return OtpResult(outcome=OtpOutcome.NO_EMAIL, message="No email on file.")

        try:
            self.api.post("/api/otp/verify-otp", json={"email": email, "code": code})
        except ApiError as exc:
            if exc.status_code == 400:
                return OtpResult(
                    outcome=OtpOutcome.INVALID_CODE,
                    message=exc.message or "Invalid or expired code.",
                )
            if exc.status_code == 429:
                return OtpResult(
                    outcome=OtpOutcome.RATE_LIMITED,
                    message=exc.message or "Too many attempts, please request a new code.",
                )
            logger.warning("OTP verify failed: %s", exc)
            return OtpResult(
                outcome=OtpOutcome.SERVER_ERROR,
                message="Verification failed, please try again later.",
            )

        return OtpResult(outcome=OtpOutcome.VERIFIED, message="Email verified")

    def confirm(
        self,
        email: str | None,
        code: str,
        action: Callable[[], T],
    ) -> tuple[OtpResult, T | None]:
        """
        Verify, then run `action`. `action` is never called on an
        unverified code.
        """
        result = self.verify_otp(email, code)
        if not result.success:
            return result, None
        return result, action()

    def close(self) -> None:
        self.cooldown.cancel()
