# wrapntrack/core/email_client.py
"""
Email delivery for Wrap N' Track.

Only the OTP confirmation mail goes out through here today. SMTP settings
are read once at import time:

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=orders@wrapntrack.ph
    SMTP_PASSWORD=<app password>
    SMTP_FROM_NAME=Wrap N' Track
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true

When SMTP_HOST / SMTP_USERNAME / SMTP_PASSWORD are missing the callers are
expected to check `smtp_configured()` and skip sending.
"""
from __future__ import annotations

import os
import smtplib
from email.message import EmailMessage


def _get_bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


SMTP_HOST: str | None = os.getenv("SMTP_HOST")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))

SMTP_USERNAME: str | None = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")

SMTP_FROM_EMAIL: str = os.getenv("SMTP_FROM_EMAIL", SMTP_USERNAME or "")
SMTP_FROM_NAME: str = os.getenv("SMTP_FROM_NAME", "Wrap N' Track")

# Use SSL on 465, or plain + STARTTLS on 587. Not both.
SMTP_USE_TLS: bool = _get_bool_env("SMTP_USE_TLS", default=True)
SMTP_USE_SSL: bool = _get_bool_env("SMTP_USE_SSL", default=False)


def smtp_configured() -> bool:
    return bool(SMTP_HOST and SMTP_USERNAME and SMTP_PASSWORD)


def _create_smtp_client() -> smtplib.SMTP:
    if SMTP_USE_SSL:
        server: smtplib.SMTP = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, timeout=30)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
        if SMTP_USE_TLS:
            server.starttls()
    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send an email to a single recipient.

    Raises
    ------
    RuntimeError:
        If required SMTP configuration is missing.
    smtplib.SMTPException:
        If the underlying SMTP connection or send fails.
    """
    if not smtp_configured():
        raise RuntimeError(
            "SMTP is not configured correctly. "
            "Please set SMTP_HOST, SMTP_USERNAME, and SMTP_PASSWORD in .env."
        )

    msg = EmailMessage()
    msg["From"] = (
        f"{SMTP_FROM_NAME} <{SMTP_FROM_EMAIL}>"
        if SMTP_FROM_EMAIL
        else SMTP_USERNAME
    )
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    server = _create_smtp_client()
    try:
        server.login(SMTP_USERNAME, SMTP_PASSWORD)  # type: ignore[arg-type]
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            pass


def send_otp_email(to_email: str, code: str, ttl_minutes: int) -> None:
    """Mail a verification code for order confirmation."""
    send_email(
        to_email=to_email,
        subject="Your Wrap N' Track OTP",
        text_body=(
            f"Your verification code is: {code}. "
            f"It expires in {ttl_minutes} minutes."
        ),
        html_body=(
            f"<p>Your verification code is: <strong>{code}</strong></p>"
            f"<p>It expires in {ttl_minutes} minutes.</p>"
        ),
    )
