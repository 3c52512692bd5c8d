"""Bearer-token request authentication wired into Flask-Login.

``request_loader`` runs lazily the first time ``current_user`` is touched:
extract the bearer token, verify signature and expiry, then re-load the
subject and check the token's email still matches it. Any failure leaves the
request anonymous and records the reason so ``unauthorized_handler`` can
report it. No session cookie ever establishes identity.
"""

from flask import g

from bowlingclub import db
from bowlingclub.errors import Unauthorized
from bowlingclub.models import User
from bowlingclub.services.tokens import verify_token

BEARER_PREFIX = 'bearer'


def extract_bearer_token(header_value):
    if not header_value:
        raise Unauthorized('인증 토큰이 없습니다.')
    parts = header_value.split()
    if len(parts) != 2 or parts[0].lower() != BEARER_PREFIX:
        raise Unauthorized('잘못된 인증 헤더 형식입니다.')
    return parts[1]


def resolve_token_user(token) -> User:
    """Verify ``token`` and return the user it belongs to."""
    payload = verify_token(token)
    user = db.session.get(User, payload['sub'])
    if user is None:
        raise Unauthorized('사용자를 찾을 수 없습니다.')
    if user.email != payload['email']:
        # Email changed after the token was issued
        raise Unauthorized('토큰이 유효하지 않습니다.')
    return user


def load_user_from_request(request):
    try:
        token = extract_bearer_token(request.headers.get('Authorization'))
        return resolve_token_user(token)
    except Unauthorized as exc:
        g.auth_error = exc.message
        return None


def handle_unauthorized():
    raise Unauthorized(g.get('auth_error'))


def init_login_manager(manager):
    manager.request_loader(load_user_from_request)
    manager.unauthorized_handler(handle_unauthorized)
    # Never look at the session or remember cookie for identity
    manager.session_protection = None

    @manager.user_loader
    def load_user(user_id):
        return None
