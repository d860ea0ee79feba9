# tests/test_utils.py
"""Pruebas unitarias de hash de contraseñas y tokens."""

import time
from datetime import timedelta

import pytest
from jose import jwt

from auth_service.utils import (
    Authenticated,
    SessionUser,
    Unauthenticated,
    authenticate_header,
    extract_bearer_token,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)

SECRET = "clave-unitaria"


# --- Contraseñas ---

@pytest.mark.parametrize("password", ["password123", "", "ñandú-contraseña", "a" * 500])
def test_verify_password_accepts_own_hash(password):
    assert verify_password(password, hash_password(password)) is True


def test_verify_password_rejects_other_password():
    stored = hash_password("correcta")
    assert verify_password("incorrecta", stored) is False
    assert verify_password("Correcta", stored) is False


def test_hash_password_uses_random_salt():
    first = hash_password("misma")
    second = hash_password("misma")
    assert first != second
    assert verify_password("misma", first)
    assert verify_password("misma", second)


def test_hash_password_format():
    salt_hex, delimiter, digest_hex = hash_password("x").partition("$")
    assert delimiter == "$"
    assert len(salt_hex) == 32
    assert len(digest_hex) == 64
    int(salt_hex, 16)
    int(digest_hex, 16)


@pytest.mark.parametrize(
    "stored",
    [
        "",
        "sin-delimitador",
        "$" + "0" * 64,
        "0" * 32 + "$",
        "zz$" + "0" * 64,
        "00$é",
        "00$éé",
        "0" * 32 + "$" + "é" * 64,
        None,
    ],
)
def test_verify_password_malformed_hash_fails_closed(stored):
    assert verify_password("x", stored) is False


def test_verify_password_lone_surrogate_does_not_raise():
    stored = hash_password("x")
    assert verify_password("\ud800", stored) is False
    assert verify_password("\ud800", hash_password("\ud800")) is True


# --- Tokens ---

def test_issue_and_verify_token():
    token = issue_token(42, "a@example.com", timedelta(hours=1), SECRET)
    assert verify_token(token, SECRET) == SessionUser(id=42, email="a@example.com")

    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == "42"
    assert claims["email"] == "a@example.com"
    assert abs(claims["iat"] - time.time()) < 5
    assert claims["exp"] - claims["iat"] == 3600
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_verify_token_wrong_secret():
    token = issue_token(1, "a@example.com", timedelta(hours=1), SECRET)
    assert verify_token(token, "otra-clave") is None


def test_verify_token_expired():
    token = issue_token(1, "a@example.com", timedelta(seconds=-1), SECRET)
    assert verify_token(token, SECRET) is None


def test_verify_token_rejects_other_algorithm():
    now = int(time.time())
    token = jwt.encode(
        {"sub": "1", "email": "a@example.com", "iat": now, "exp": now + 3600},
        SECRET,
        algorithm="HS512",
    )
    assert verify_token(token, SECRET) is None


@pytest.mark.parametrize(
    "claims",
    [
        {"email": "a@example.com"},
        {"sub": "abc", "email": "a@example.com"},
        {"sub": "1"},
        {"sub": 1, "email": "a@example.com"},
        {"sub": "²", "email": "a@example.com"},
        {"sub": "١٢", "email": "a@example.com"},
    ],
)
def test_verify_token_requires_numeric_sub_and_email(claims):
    now = int(time.time())
    token = jwt.encode({**claims, "iat": now, "exp": now + 3600}, SECRET, algorithm="HS256")
    assert verify_token(token, SECRET) is None


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_verify_token_malformed(token):
    assert verify_token(token, SECRET) is None


# --- Cabecera Authorization ---

@pytest.mark.parametrize(
    "header, expected",
    [
        (None, None),
        ("", None),
        ("Bearer", None),
        ("Bearer ", None),
        ("Basic dXNlcjpwYXNz", None),
        ("bearer abc", None),
        ("Bearer abc", "abc"),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


def test_authenticate_header_results():
    token = issue_token(7, "b@example.com", timedelta(minutes=5), SECRET)

    assert authenticate_header(f"Bearer {token}", SECRET) == Authenticated(
        user=SessionUser(id=7, email="b@example.com")
    )
    assert authenticate_header(None, SECRET) == Unauthenticated()
    assert authenticate_header("Bearer invalid", SECRET) == Unauthenticated()
    assert authenticate_header(f"Bearer {token}", "otra") == Unauthenticated()
