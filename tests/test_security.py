from datetime import datetime, timedelta

import pytest
from jose import jwt

from link_server.security import (
    ALGO,
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct-horse")
        assert hashed.startswith("$2")
        assert verify_password("correct-horse", hashed)
        assert not verify_password("wrong-horse", hashed)

    def test_too_short(self):
        with pytest.raises(ValueError):
            hash_password("short")

    def test_too_long(self):
        with pytest.raises(ValueError):
            hash_password("x" * 73)

    def test_garbage_hash_does_not_verify(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestSessionTokens:
    def test_round_trip(self):
        identity = decode_session_token(create_session_token("user-1", "kim@example.com"))
        assert identity.user_id == "user-1"
        assert identity.email == "kim@example.com"

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "user-1", "email": "a@b.com"}, "other-secret", algorithm=ALGO)
        assert decode_session_token(token) is None

    def test_expired(self):
        token = jwt.encode(
            {"sub": "user-1", "email": "a@b.com", "exp": datetime.utcnow() - timedelta(minutes=1)},
            "test-secret",
            algorithm=ALGO,
        )
        assert decode_session_token(token) is None

    def test_missing_claims(self):
        token = jwt.encode({"sub": "user-1"}, "test-secret", algorithm=ALGO)
        assert decode_session_token(token) is None
