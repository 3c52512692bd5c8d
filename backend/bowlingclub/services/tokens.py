"""Bearer token issue and verification.

HS256 tokens carrying ``{sub, email, iat, exp}``. The signing secret and the
default lifetime are read from the app config on every call.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from flask import current_app

from bowlingclub.errors import Unauthorized

ALGORITHM = 'HS256'


def _secret() -> str:
    cfg = current_app.config
    return cfg.get('JWT_SECRET') or cfg['SECRET_KEY']


def issue_token(user_id: int, email: str, expires_in: Optional[int] = None) -> str:
    if expires_in is None:
        expires_in = int(current_app.config.get('JWT_EXPIRES_IN_SEC', 7 * 24 * 60 * 60))
    now = datetime.now(timezone.utc)
    payload = {
        # PyJWT requires a string subject
        'sub': str(user_id),
        'email': email,
        'iat': now,
        'exp': now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, _secret(), algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """Decode and validate a token.

    Raises Unauthorized when the signature is invalid, the token is malformed
    or ``exp`` has passed.
    """
    try:
        payload = jwt.decode(
            token,
            _secret(),
            algorithms=[ALGORITHM],
            options={'require': ['sub', 'email', 'iat', 'exp']},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized('토큰이 만료되었습니다.')
    except jwt.InvalidTokenError:
        raise Unauthorized('토큰이 유효하지 않습니다.')
    try:
        payload['sub'] = int(payload['sub'])
    except (TypeError, ValueError):
        raise Unauthorized('토큰이 유효하지 않습니다.')
    return payload
