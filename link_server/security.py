from dataclasses import dataclass
from datetime import datetime, timedelta

import bcrypt
from jose import JWTError, jwt

from link_server.config import SESSION_SECRET, SESSION_EXPIRE_MINUTES

ALGO = "HS256"
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt ignores anything past this


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of a request."""

    user_id: str
    email: str


def hash_password(password: str) -> str:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"비밀번호는 {MIN_PASSWORD_LENGTH}자 이상이어야 합니다.")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError("비밀번호가 너무 깁니다.")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("ascii")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        return False


def create_session_token(user_id: str, email: str) -> str:
    now = datetime.utcnow()
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=SESSION_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, SESSION_SECRET, algorithm=ALGO)


def decode_session_token(token: str) -> Identity | None:
    """Return the identity carried by a session token, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, SESSION_SECRET, algorithms=[ALGO])
    except JWTError:
        return None
    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        return None
    return Identity(user_id=user_id, email=email)
