from flask import current_app
from sqlalchemy.exc import IntegrityError

from bowlingclub import db
from bowlingclub.errors import Conflict, NotFound, Unauthorized
from bowlingclub.models import User
from bowlingclub.services.passwords import hash_password, check_password
from bowlingclub.services.tokens import issue_token

INVALID_CREDENTIALS = '이메일 또는 비밀번호가 올바르지 않습니다.'


def normalize_email(email: str) -> str:
    return (email or '').strip().lower()


def _auth_payload(user: User) -> dict:
    return {
        'accessToken': issue_token(user.id, user.email),
        'user': user.to_dict(),
    }


def register(email, password, name, phone_number=None, profile_image_url=None) -> dict:
    email = normalize_email(email)
    if User.query.filter_by(email=email).first():
        raise Conflict('이미 존재하는 이메일입니다.')

    user = User(
        email=email,
        name=name,
        password_hash=hash_password(password),
        phone_number=phone_number,
        profile_image_url=profile_image_url,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.session.rollback()
        raise Conflict('이미 존재하는 이메일입니다.')

    current_app.logger.info(f"[auth.register] user={user.id}")
    return _auth_payload(user)


def login(email, password) -> dict:
    user = User.query.filter_by(email=normalize_email(email)).first()
    if not user or not check_password(user.password_hash, password):
        # Same message for unknown email and wrong password
        raise Unauthorized(INVALID_CREDENTIALS)

    current_app.logger.info(f"[auth.login] user={user.id}")
    return _auth_payload(user)


def get_profile(user_id: int) -> dict:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound('사용자를 찾을 수 없습니다.')
    return user.to_dict()
