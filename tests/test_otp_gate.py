import pytest

from wrapntrack.storefront.cooldown import Cooldown
from wrapntrack.storefront.otp_gate import OtpGate, OtpOutcome

SEND = ("POST", "/api/otp/send-otp")
VERIFY = ("POST", "/api/otp/verify-otp")
EMAIL = "bea@gmail.com"


@pytest.fixture
def gate(fake_api, clock):
    return OtpGate(fake_api, Cooldown(30, clock=clock))


def test_send_starts_cooldown(gate, backend):
    result = gate.send_otp(EMAIL)
    assert result.outcome is OtpOutcome.SENT
    assert result.success
    assert backend.calls == [("POST", "/api/otp/send-otp", {"email": EMAIL})]
    assert gate.cooldown.is_active
    assert gate.cooldown.remaining == 30


def test_resend_twice_within_cooldown_sends_once(gate, backend, clock):
    gate.send_otp(EMAIL)
    clock.advance(5)
    first = gate.resend_otp()
    clock.advance(20)
    second = gate.resend_otp()

    assert first.outcome is OtpOutcome.COOLDOWN
    assert first.message == "Please wait 25s before resending"
    assert second.outcome is OtpOutcome.COOLDOWN
    assert backend.count(*SEND) == 1


def test_resend_after_cooldown(gate, backend, clock):
    gate.send_otp(EMAIL)
    clock.advance(30)
    assert gate.resend_otp().outcome is OtpOutcome.SENT
    assert backend.count(*SEND) == 2


def test_no_email_makes_no_call(gate, backend):
    assert gate.send_otp(None).outcome is OtpOutcome.NO_EMAIL
    assert gate.resend_otp().outcome is OtpOutcome.NO_EMAIL
    assert backend.calls == []


@pytest.mark.parametrize(
    "status, outcome, message",
    [
        (429, OtpOutcome.RATE_LIMITED, "Please wait 12s before resending"),
        (400, OtpOutcome.BAD_REQUEST, "Invalid email address: bad"),
        (500, OtpOutcome.SERVER_ERROR, "Server error, please try again later."),
    ],
)
def test_send_error_mapping(gate, backend, status, outcome, message):
    backend.reply(*SEND, status, {"detail": message})
    result = gate.send_otp(EMAIL)
    assert result.outcome is outcome
    assert result.message == message
    assert not gate.cooldown.is_active


@pytest.mark.parametrize("code", ["", "12345", "1234567", "12a456", None])
def test_malformed_code_is_checked_locally(gate, backend, code):
    result = gate.verify_otp(EMAIL, code)
    assert result.outcome is OtpOutcome.INVALID_CODE
    assert backend.calls == []


def test_verify_maps_server_answers(gate, backend):
    assert gate.verify_otp(EMAIL, "123456").outcome is OtpOutcome.VERIFIED

    backend.reply(*VERIFY, 400, {"detail": "Invalid code. 4 attempts left."})
    result = gate.verify_otp(EMAIL, "123456")
    assert result.outcome is OtpOutcome.INVALID_CODE
    assert result.message == "Invalid code. 4 attempts left."

    backend.reply(*VERIFY, 429, {"detail": "Too many attempts, please request a new code"})
    assert gate.verify_otp(EMAIL, "123456").outcome is OtpOutcome.RATE_LIMITED


def test_confirm_never_runs_action_on_bad_code(gate, backend):
    calls = []
    backend.reply(*VERIFY, 400, {"detail": "Invalid code. 4 attempts left."})

    result, placed = gate.confirm(EMAIL, "654321", lambda: calls.append("placed"))

    assert not result.success
    assert placed is None
    assert calls == []


def test_confirm_runs_action_after_verify(gate, backend):
    result, placed = gate.confirm(EMAIL, "654321", lambda: "order")
    assert result.outcome is OtpOutcome.VERIFIED
    assert placed == "order"


def test_close_cancels_cooldown(gate):
    gate.send_otp(EMAIL)
    gate.close()
    assert not gate.cooldown.is_active
