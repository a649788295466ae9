import uuid

from jose import jwt
from sqlmodel import select

from wrapntrack.core.config import get_settings
from wrapntrack.models.user import User


def bearer(claims):
    settings = get_settings()
    return {"Authorization": f"Bearer {jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)}"}


def test_bad_signature_is_rejected(client):
    token = jwt.encode({"sub": str(uuid.uuid4()), "email": "bea@gmail.com"}, "other-secret", algorithm="HS256")
    res = client.get("/api/cart", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid token"


def test_claims_must_identify_account(client):
    res = client.get("/api/cart", headers=bearer({"sub": str(uuid.uuid4())}))
    assert res.json()["detail"] == "Token missing sub/email"

    res = client.get("/api/cart", headers=bearer({"sub": "not-a-uuid", "email": "bea@gmail.com"}))
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid sub in token"


def test_first_request_provisions_account(client, session):
    sub = uuid.uuid4()
    headers = bearer({"sub": str(sub), "email": "bea@gmail.com", "name": "Bea Santos", "role": "admin"})

    assert client.get("/api/cart", headers=headers).status_code == 200
    assert client.get("/api/cart", headers=headers).status_code == 200

    [user] = session.exec(select(User)).all()
    assert user.id == sub
    assert user.name == "Bea Santos"
    # unknown roles fall back to customer
    assert user.role == "customer"


def test_name_defaults_to_email_prefix(client, session):
    client.get("/api/orders", headers=bearer({"sub": str(uuid.uuid4()), "email": "staff@wrapntrack.ph", "role": "employee"}))
    [user] = session.exec(select(User)).all()
    assert (user.name, user.role) == ("staff", "employee")


def test_anonymous_can_browse_inventory(client, seed):
    assert client.get("/api/inventory").status_code == 200
    assert client.get("/api/cart").json()["detail"] == "No token provided"
