from datetime import datetime, timedelta, timezone

import pytest

from transport_desk.models.password_reset_otp import PasswordResetOTP
from transport_desk.services import auth_service as auth_module
from transport_desk.utils.security import create_access_token

API = "/api/v1"
NEW_PASSWORD = "Recovered42"


@pytest.fixture
def sent_codes(monkeypatch):
    codes = []

    def _capture(to_email, name, otp_code):
        codes.append((to_email, otp_code))
        return True

    monkeypatch.setattr(auth_module, "send_otp_email", _capture)
    return codes


def _forgot(client, email):
    return client.post(f"{API}/auth/forgot-password", json={"email": email})


def _verify(client, email, code):
    return client.post(f"{API}/auth/verify-otp", json={"email": email, "otpCode": code})


def _reset(client, token, password=NEW_PASSWORD):
    return client.post(f"{API}/auth/reset-password", json={
        "resetToken": token, "newPassword": password, "confirmPassword": password,
    })


def test_full_recovery_flow(client, admin, sent_codes, password):
    r = _forgot(client, admin.email.upper())
    assert r.status_code == 200
    assert r.json()["message"] == "If the email exists, an OTP has been sent."
    [(to_email, code)] = sent_codes
    assert to_email == admin.email
    assert len(code) == 6 and code.isdigit()

    r = _verify(client, admin.email, code)
    assert r.status_code == 200
    token = r.json()["data"]["resetToken"]

    assert _reset(client, token).status_code == 200
    assert client.post(f"{API}/auth/login", json={"email": admin.email, "password": password}).status_code == 401
    assert client.post(f"{API}/auth/login", json={"email": admin.email, "password": NEW_PASSWORD}).status_code == 200


def test_unknown_or_inactive_email_looks_the_same(client, make_user, sent_codes):
    inactive = make_user(is_active=False)
    for email in ("nobody@example.org", inactive.email):
        r = _forgot(client, email)
        assert r.status_code == 200
        assert r.json()["message"] == "If the email exists, an OTP has been sent."
    assert sent_codes == []


def test_wrong_code_is_rejected(client, admin, sent_codes):
    _forgot(client, admin.email)
    code = sent_codes[0][1]
    wrong = "0" * 6 if code != "0" * 6 else "1" * 6
    r = _verify(client, admin.email, wrong)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "OTP_INVALID"


def test_code_works_once(client, admin, sent_codes):
    _forgot(client, admin.email)
    code = sent_codes[0][1]
    assert _verify(client, admin.email, code).status_code == 200
    r = _verify(client, admin.email, code)
    assert r.json()["error"]["code"] == "OTP_INVALID"


def test_new_request_retires_the_previous_code(client, db, admin, sent_codes):
    _forgot(client, admin.email)
    _forgot(client, admin.email)
    live = db.query(PasswordResetOTP).filter(
        PasswordResetOTP.userId == admin.id, PasswordResetOTP.isUsed == False,
    ).all()
    assert len(live) == 1
    assert live[0].otpCode == sent_codes[-1][1]


def test_expired_code(client, db, admin, sent_codes):
    _forgot(client, admin.email)
    otp = db.query(PasswordResetOTP).filter(PasswordResetOTP.userId == admin.id).one()
    otp.expiresAt = datetime.now(timezone.utc) - timedelta(minutes=1)
    db.commit()

    r = _verify(client, admin.email, sent_codes[0][1])
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "OTP_EXPIRED"


def test_access_token_cannot_reset_password(client, admin):
    token = create_access_token(admin.id, admin.role.value, admin.department.value)
    r = _reset(client, token)
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid reset token"


def test_reset_token_is_not_an_access_token(client, admin, sent_codes):
    _forgot(client, admin.email)
    token = _verify(client, admin.email, sent_codes[0][1]).json()["data"]["resetToken"]
    r = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_reset_password_is_validated(client):
    r = _reset(client, "whatever", password="weak")
    assert r.status_code == 422
