from flask import Blueprint
from flask_login import login_required, current_user

from bowlingclub.api import envelope
from bowlingclub.services import dashboard as dashboard_service
from bowlingclub.socketio_events import broadcast_score
from bowlingclub.validators import get_json_body, validate_quick_game

dashboard = Blueprint('dashboard', __name__)


@dashboard.route('/stats', methods=['GET'])
@login_required
def stats():
    return envelope(dashboard_service.get_user_dashboard(current_user.id), '대시보드 조회가 완료되었습니다.')


@dashboard.route('/clubs', methods=['GET'])
@login_required
def user_clubs():
    return envelope(dashboard_service.get_user_clubs(current_user.id), '클럽 목록 조회가 완료되었습니다.')


@dashboard.route('/game', methods=['POST'])
@login_required
def add_game():
    data = validate_quick_game(get_json_body(('clubId', 'score', 'gameType', 'bowlingCenterId')))
    game_score = dashboard_service.add_game_record(current_user.id, **data)
    broadcast_score(game_score)
    return envelope(game_score.to_dict(include_game=True), '게임 기록이 추가되었습니다.', 201)
