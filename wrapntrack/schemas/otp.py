# wrapntrack/schemas/otp.py
from sqlmodel import SQLModel


class OtpSendRequest(SQLModel):
    email: str | None = None


class OtpVerifyRequest(SQLModel):
    email: str | None = None
    code: str | int | None = None


class OtpResponse(SQLModel):
    success: bool = True
    message: str
