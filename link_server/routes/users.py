import logging
from datetime import datetime

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from link_server.database import get_db
from link_server.deps import get_current_user, get_identity
from link_server.errors import Conflict, InvalidInput, Unexpected
from link_server.middleware import set_session_cookie
from link_server.models import User
from link_server.security import Identity, create_session_token
from link_server.serializers import serialize_user
from link_server.storage import has_upload, save_image

logger = logging.getLogger("link")

router = APIRouter(prefix="/user")


@router.get("/me")
def get_me(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    user = get_current_user(identity, db)
    return {"user": serialize_user(user)}


@router.post("/update")
def update_profile(
    request: Request,
    response: Response,
    name: str = Form(""),
    email: str = Form(""),
    image: UploadFile | None = File(None),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    user = get_current_user(identity, db)

    new_email = email.strip().lower()
    if new_email and new_email != user.email:
        if "@" not in new_email:
            raise InvalidInput("올바른 이메일 주소를 입력해주세요.")
        taken = db.query(User).filter(User.email == new_email, User.id != user.id).first()
        if taken:
            raise Conflict("이미 사용 중인 이메일입니다.")
        user.email = new_email

    if name.strip():
        user.name = name.strip()
    if has_upload(image):
        user.image = save_image(image)

    user.updated_at = datetime.utcnow()
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("User update error", exc_info=True, extra={"extra_data": {"user_id": identity.user_id}})
        raise Unexpected("프로필 업데이트 중 오류가 발생했습니다.")
    db.refresh(user)

    # The session token carries the email, so reissue it after a change
    set_session_cookie(response, request, create_session_token(user.id, user.email))
    logger.info("Profile updated", extra={"extra_data": {"user_id": user.id}})
    return {
        "success": True,
        "user": {"name": user.name, "email": user.email, "image": user.image},
    }
