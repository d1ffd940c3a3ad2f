import logging
import secrets
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from link_server import oauth
from link_server.config import FRONTEND_URL
from link_server.database import get_db
from link_server.deps import get_optional_identity
from link_server.errors import Conflict, InvalidInput, ServiceUnavailable, Unauthenticated, UpstreamError
from link_server.middleware import clear_session_cookie, set_session_cookie
from link_server.models import User
from link_server.ratelimit import limiter
from link_server.schemas import LoginIn, SignupIn
from link_server.security import Identity, create_session_token, hash_password, verify_password
from link_server.serializers import serialize_user

logger = logging.getLogger("link")

router = APIRouter(prefix="/auth")

OAUTH_STATE_COOKIE = "link_oauth_state"
OAUTH_STATE_MAX_AGE = 600


def _normalize_email(email: str) -> str:
    return email.strip().lower()


@router.post("/signup", status_code=201)
@limiter.limit("5/minute")
def signup(request: Request, data: SignupIn, db: Session = Depends(get_db)):
    email = _normalize_email(data.email)
    if not email or not data.password:
        raise InvalidInput("이메일과 비밀번호를 입력해주세요.")
    if "@" not in email:
        raise InvalidInput("올바른 이메일 주소를 입력해주세요.")

    if db.query(User).filter(User.email == email).first():
        raise Conflict("이미 가입된 이메일입니다.")

    try:
        hashed = hash_password(data.password)
    except ValueError as e:
        raise InvalidInput(str(e))

    user = User(email=email, name=(data.name or "").strip() or None, hashed_password=hashed)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User registered", extra={"extra_data": {"user_id": user.id}})
    return {"user": serialize_user(user)}


@router.post("/login")
@limiter.limit("10/minute")
def login(request: Request, response: Response, data: LoginIn, db: Session = Depends(get_db)):
    email = _normalize_email(data.email)
    if not email or not data.password:
        raise InvalidInput("이메일과 비밀번호를 입력해주세요.")

    user = db.query(User).filter(User.email == email).first()
    if not user or not user.hashed_password:
        raise Unauthenticated("등록되지 않은 이메일입니다.")
    if not verify_password(data.password, user.hashed_password):
        logger.warning("Login failed", extra={"extra_data": {"user_id": user.id}})
        raise Unauthenticated("비밀번호가 일치하지 않습니다.")

    token = create_session_token(user.id, user.email)
    set_session_cookie(response, request, token)
    return {"access_token": token, "user": serialize_user(user)}


@router.post("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"success": True}


@router.get("/session")
def get_session(identity: Identity | None = Depends(get_optional_identity), db: Session = Depends(get_db)):
    if identity is None:
        return None
    user = db.query(User).filter(User.id == identity.user_id).first()
    if not user:
        return None
    return {"user": serialize_user(user)}


@router.get("/google/login")
def google_login(request: Request):
    if not oauth.is_configured():
        raise ServiceUnavailable("Google sign-in is not configured")

    state = secrets.token_urlsafe(24)
    response = RedirectResponse(oauth.authorization_url(state), status_code=302)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=request.url.scheme == "https",
        path="/api/auth",
    )
    return response


@router.get("/google/callback")
def google_callback(
    request: Request,
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    db: Session = Depends(get_db),
):
    if not oauth.is_configured():
        raise ServiceUnavailable("Google sign-in is not configured")
    if error:
        return RedirectResponse(f"{FRONTEND_URL}/auth/login?{urlencode({'error': error})}", status_code=302)

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        raise InvalidInput("Invalid OAuth state")

    try:
        profile = oauth.fetch_profile(code)
    except (httpx.HTTPError, KeyError, ValueError) as e:
        logger.error(f"Google sign-in failed: {e}", exc_info=True)
        raise UpstreamError("Google sign-in failed")

    email = _normalize_email(profile.email)
    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(email=email, name=profile.name, image=profile.picture)
        db.add(user)
        logger.info("User created from Google sign-in", extra={"extra_data": {"email": email}})
    else:
        user.name = profile.name or user.name
        user.image = profile.picture or user.image
    db.commit()
    db.refresh(user)

    response = RedirectResponse(f"{FRONTEND_URL}/dashboard", status_code=302)
    set_session_cookie(response, request, create_session_token(user.id, user.email))
    response.delete_cookie(key=OAUTH_STATE_COOKIE, path="/api/auth")
    return response
