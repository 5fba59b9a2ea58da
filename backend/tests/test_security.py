from datetime import datetime, timedelta, timezone
import pytest
from users_api.core.exceptions import InvalidCredentials, ServerFault


def test_hash_is_salted_and_self_describing(credentials):
    first = credentials.get_password_hash("hunter2")
    second = credentials.get_password_hash("hunter2")

    assert first != second
    assert first.startswith("$2b$04$")
    assert "hunter2" not in first


def test_verify_password(credentials):
    hashed = credentials.get_password_hash("hunter2")

    assert credentials.verify_password("hunter2", hashed) is True
    assert credentials.verify_password("hunter3", hashed) is False


def test_verify_malformed_hash_raises(credentials):
    with pytest.raises(ServerFault):
        credentials.verify_password("hunter2", "plaintext-not-a-hash")


def test_token_round_trip(credentials):
    token = credentials.create_access_token({"id": 7, "name": "Alice"})

    claims = credentials.decode_access_token(token)

    assert claims["id"] == 7
    assert claims["name"] == "Alice"


def test_token_expires_after_one_hour(credentials):
    before = datetime.now(timezone.utc).timestamp()

    claims = credentials.decode_access_token(
        credentials.create_access_token({"id": 7, "name": "Alice"}))

    assert 3590 <= claims["exp"] - before <= 3610


def test_expired_token_is_rejected(credentials):
    token = credentials.create_access_token({"id": 7}, expires_delta=timedelta(minutes=-61))

    with pytest.raises(InvalidCredentials, match="Token has expired."):
        credentials.decode_access_token(token)


def test_tampered_token_is_invalid(credentials):
    header, _, signature = credentials.create_access_token({"id": 7, "name": "Alice"}).split(".")
    _, other_payload, _ = credentials.create_access_token({"id": 1, "name": "Root"}).split(".")
    tampered = ".".join([header, other_payload, signature])

    with pytest.raises(InvalidCredentials, match="Invalid token."):
        credentials.decode_access_token(tampered)
