from flask_socketio import join_room, leave_room, emit, ConnectionRefusedError
from flask import request, current_app
from typing import Dict

from bowlingclub import socketio
from bowlingclub.errors import Unauthorized
from bowlingclub.models import GameScore
from bowlingclub.security import extract_bearer_token, resolve_token_user
from bowlingclub.services.dashboard import game_activity, is_practice_club
from bowlingclub.services.games import get_active_membership

NAMESPACE = '/ws'

# sid -> authenticated user id
_sid_to_user: Dict[str, int] = {}


def club_room(club_id: int) -> str:
    return f"club:{club_id}"


def _get_sid() -> str:
    return request.sid  # type: ignore[attr-defined]


def handle_connect(auth=None):
    token = (auth or {}).get('token') if isinstance(auth, dict) else None
    try:
        if not token:
            token = extract_bearer_token(request.headers.get('Authorization'))
        user = resolve_token_user(token)
    except Unauthorized as exc:
        raise ConnectionRefusedError(exc.message)
    _sid_to_user[_get_sid()] = user.id
    emit('connected', {'message': 'Connected to /ws', 'userId': user.id})


def handle_disconnect(reason=None):
    _sid_to_user.pop(_get_sid(), None)


def _club_id_from(data):
    try:
        return int((data or {}).get('club_id'))
    except (TypeError, ValueError):
        return None


def handle_join_club(data):
    club_id = _club_id_from(data)
    if club_id is None:
        emit('error', {'message': 'club_id is required'})
        return
    user_id = _sid_to_user.get(_get_sid())
    if user_id is None or not get_active_membership(user_id, club_id):
        emit('error', {'message': '해당 클럽의 멤버가 아닙니다.'})
        return
    room = club_room(club_id)
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_club(data):
    club_id = _club_id_from(data)
    if club_id is None:
        emit('error', {'message': 'club_id is required'})
        return
    room = club_room(club_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def broadcast_score(game_score: GameScore) -> None:
    """Push a newly recorded score to everyone watching its club."""
    game = game_score.game
    if is_practice_club(game.club):
        # Practice records are private to their bowler
        return
    activity = game_activity(game.club, game_score, game.game_date)
    activity['time'] = activity['time'].isoformat()
    activity['clubId'] = game.club_id
    activity['scoreId'] = game_score.id
    socketio.emit('club_activity', activity, to=club_room(game.club_id), namespace=NAMESPACE)
    current_app.logger.debug(f"[ws.broadcast] club={game.club_id} score={game_score.id}")


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('join_club', handle_join_club, namespace=NAMESPACE)
    socketio.on_event('leave_club', handle_leave_club, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
