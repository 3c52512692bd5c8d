from flask import Blueprint, request
from flask_login import login_required, current_user

from bowlingclub.api import envelope
from bowlingclub.services import games as game_service
from bowlingclub.socketio_events import broadcast_score
from bowlingclub.validators import (
    get_json_body,
    pagination_args,
    score_list_args,
    validate_create_game,
    validate_create_score,
    validate_update_score,
)

games = Blueprint('games', __name__)


@games.before_request
@login_required
def require_login():
    """Every game route needs an authenticated caller."""


@games.route('', methods=['POST'])
def create_game():
    data = validate_create_game(get_json_body(('clubId', 'bowlingCenterId', 'gameDate', 'gameType')))
    game = game_service.create_game(current_user.id, **data)
    return envelope(game.to_dict(), '게임이 생성되었습니다.', 201)


@games.route('/scores', methods=['POST'])
def add_game_score():
    data = validate_create_score(get_json_body(('gameId', 'score', 'gameOrder')))
    game_score = game_service.add_game_score(current_user.id, **data)
    broadcast_score(game_score)
    return envelope(game_score.to_dict(include_game=True), '게임 점수가 추가되었습니다.', 201)


@games.route('/my-stats', methods=['GET'])
def my_stats():
    return envelope(game_service.get_user_stats(current_user.id), '게임 통계 조회가 완료되었습니다.')


@games.route('/my-scores', methods=['GET'])
def my_scores():
    page, limit = pagination_args(request.args)
    sort, filters = score_list_args(request.args)
    result = game_service.get_user_game_scores(current_user.id, page, limit, sort, filters)
    return envelope(result, '게임 점수 목록 조회가 완료되었습니다.')


@games.route('/<int:game_id>/scores', methods=['GET'])
def game_scores(game_id):
    return envelope(game_service.get_game_scores(game_id), '게임 점수 상세 조회가 완료되었습니다.')


@games.route('/club/<int:club_id>', methods=['GET'])
def club_games(club_id):
    page, limit = pagination_args(request.args)
    result = game_service.get_club_games(club_id, page, limit)
    return envelope(result, '클럽 게임 목록 조회가 완료되었습니다.')


@games.route('/scores/<int:score_id>', methods=['PATCH'])
def update_game_score(score_id):
    score = validate_update_score(get_json_body(('score',)))
    game_score = game_service.update_game_score(current_user.id, score_id, score)
    return envelope(game_score.to_dict(include_game=True), '게임 점수가 수정되었습니다.')


@games.route('/scores/<int:score_id>', methods=['DELETE'])
def delete_game_score(score_id):
    game_service.delete_game_score(current_user.id, score_id)
    return envelope(message='게임 점수가 삭제되었습니다.')
