# wrapntrack/services/otp_service.py
import logging
import math
import secrets
import smtplib
import threading
import time
from dataclasses import dataclass
from typing import Callable

from email_validator import EmailNotValidError, validate_email
from fastapi import HTTPException, status

from wrapntrack.core import email_client
from wrapntrack.core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class OtpChallenge:
    code: str
    expires_at: float
    next_available_at: float
    attempts: int = 0


def generate_otp(length: int = 6) -> str:
    """Random numeric code with no leading zero."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


class OtpService:
    """
    One-time password challenges for order confirmation.

    Challenges live in process memory keyed by email. A new send
    supersedes the previous challenge; a successful verify, an expired
    code or exhausted attempts consume it.
    """

    def __init__(
        self,
        ttl_seconds: int,
        resend_cooldown_seconds: int,
        max_attempts: int,
        code_length: int = 6,
        clock: Callable[[], float] = time.monotonic,
        mailer: Callable[[str, str, int], None] | None = None,
    ):
        self.ttl_seconds = ttl_seconds
        self.resend_cooldown_seconds = resend_cooldown_seconds
        self.max_attempts = max_attempts
        self.code_length = code_length
        self.clock = clock
        self.mailer = mailer
        self._store: dict[str, OtpChallenge] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "OtpService":
        settings = get_settings()
        return cls(
            ttl_seconds=settings.OTP_TTL_SECONDS,
            resend_cooldown_seconds=settings.OTP_RESEND_COOLDOWN_SECONDS,
            max_attempts=settings.OTP_MAX_ATTEMPTS,
            code_length=settings.OTP_CODE_LENGTH,
        )

    # ---- helpers ----

    @staticmethod
    def _normalize_email(email: str | None) -> str:
        if not email or not email.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email is required",
            )
        try:
            result = validate_email(email.strip(), check_deliverability=False)
        except EmailNotValidError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid email address: {exc}",
            )
        return result.normalized.lower()

    def _deliver(self, email: str, code: str) -> None:
        ttl_minutes = max(1, self.ttl_seconds // 60)
        if self.mailer is not None:
            self.mailer(email, code, ttl_minutes)
        elif email_client.smtp_configured():
            email_client.send_otp_email(email, code, ttl_minutes)
        else:
            logger.warning("OTP email skipped (no SMTP config). To: %s, code: %s", email, code)

    # ---- public operations ----

    def send(self, email: str | None) -> str:
        """
        Issue a fresh code for `email` and mail it.

        Raises:
            HTTPException(400): missing / malformed email
            HTTPException(429): resend cooldown still running
            HTTPException(500): mail delivery failed
        """
        address = self._normalize_email(email)
        now = self.clock()

        with self._lock:
            existing = self._store.get(address)
            if existing and existing.next_available_at > now:
                wait = math.ceil(existing.next_available_at - now)
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail=f"Please wait {wait}s before resending",
                )

            code = generate_otp(self.code_length)
            self._store[address] = OtpChallenge(
                code=code,
                expires_at=now + self.ttl_seconds,
                next_available_at=now + self.resend_cooldown_seconds,
            )

        try:
            self._deliver(address, code)
        except (smtplib.SMTPException, OSError, RuntimeError):
            logger.exception("Error sending OTP email to %s", address)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to send OTP email",
            )

        logger.info("OTP issued for %s", address)
        return "OTP sent"

    def verify(self, email: str | None, code: str | int | None) -> str:
        """
        Check `code` against the pending challenge for `email`.

        Raises:
            HTTPException(400): missing fields, no challenge, expired, wrong code
            HTTPException(429): attempts exhausted; a new code is required
        """
        if not email or code is None or str(code).strip() == "":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email and code are required",
            )
        address = self._normalize_email(email)
        now = self.clock()

        with self._lock:
            entry = self._store.get(address)
            if entry is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="No OTP requested for this email",
                )

            if entry.expires_at < now:
                del self._store[address]
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="OTP expired",
                )

            if entry.attempts >= self.max_attempts:
                del self._store[address]
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail="Too many attempts, please request a new code",
                )

            if secrets.compare_digest(entry.code, str(code).strip()):
                del self._store[address]
                logger.info("OTP verified for %s", address)
                return "OTP verified"

            entry.attempts += 1
            remaining = self.max_attempts - entry.attempts

        logger.warning("Invalid OTP for %s, %d attempts left", address, remaining)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid code. {remaining} attempts left.",
        )
