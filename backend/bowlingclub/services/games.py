"""Game and score services: membership-gated writes and per-user statistics."""

from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from flask import current_app

from bowlingclub import db
from bowlingclub.errors import Forbidden, NotFound
from bowlingclub.models import BowlingCenter, Club, ClubMember, Game, GameScore

RECENT_GAMES_LIMIT = 5
MONTHLY_STATS_LIMIT = 6


def round_half_up(total, count) -> int:
    """Arithmetic mean rounded half up; 0 for an empty set."""
    if not count:
        return 0
    return int((Decimal(total) / Decimal(count)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def get_active_membership(user_id: int, club_id: int) -> Optional[ClubMember]:
    return ClubMember.query.filter_by(user_id=user_id, club_id=club_id, is_active=True).first()


def require_membership(user_id: int, club_id: int) -> ClubMember:
    membership = get_active_membership(user_id, club_id)
    if not membership:
        current_app.logger.info(f"[games.forbidden] user={user_id} club={club_id} not an active member")
        raise Forbidden('해당 클럽의 멤버가 아닙니다.')
    return membership


def create_game(user_id, club_id, bowling_center_id, game_date, game_type=None) -> Game:
    require_membership(user_id, club_id)
    if not db.session.get(BowlingCenter, bowling_center_id):
        raise NotFound('볼링장을 찾을 수 없습니다.')

    game = Game(
        club_id=club_id,
        bowling_center_id=bowling_center_id,
        game_date=game_date,
        game_type=game_type,
    )
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[games.create] game={game.id} club={club_id} user={user_id}")
    return game


def add_game_score(user_id, game_id, score, game_order) -> GameScore:
    game = db.session.get(Game, game_id)
    if not game:
        raise NotFound('게임을 찾을 수 없습니다.')
    require_membership(user_id, game.club_id)

    game_score = GameScore(game_id=game.id, user_id=user_id, score=score, game_order=game_order)
    db.session.add(game_score)
    db.session.commit()
    current_app.logger.info(f"[games.score] score={game_score.id} game={game.id} user={user_id}")
    return game_score


def _recent_game_item(game_score: GameScore) -> dict:
    game = game_score.game
    return {
        'id': game_score.id,
        'score': game_score.score,
        'gameOrder': game_score.game_order,
        'gameDate': game.game_date.isoformat(),
        'gameType': game.game_type,
        'club': {'name': game.club.name},
        'bowlingCenter': {'name': game.bowling_center.name},
    }


def get_user_stats(user_id: int) -> dict:
    game_scores = (
        GameScore.query
        .filter_by(user_id=user_id)
        .order_by(GameScore.created_at.desc(), GameScore.id.desc())
        .all()
    )

    if not game_scores:
        return {
            'totalGames': 0,
            'averageScore': 0,
            'bestScore': 0,
            'worstScore': 0,
            'totalScoreSum': 0,
            'recentGames': [],
            'monthlyStats': [],
        }

    values = [s.score for s in game_scores]
    total_games = len(values)
    total_score_sum = sum(values)

    monthly = OrderedDict()
    for s in game_scores:
        month = s.game.game_date.strftime('%Y-%m')
        bucket = monthly.setdefault(month, {'count': 0, 'sum': 0})
        bucket['count'] += 1
        bucket['sum'] += s.score

    monthly_stats = [
        {
            'month': month,
            'gameCount': bucket['count'],
            'averageScore': round_half_up(bucket['sum'], bucket['count']),
        }
        for month, bucket in sorted(monthly.items(), key=lambda kv: kv[0], reverse=True)
    ][:MONTHLY_STATS_LIMIT]

    return {
        'totalGames': total_games,
        'averageScore': round_half_up(total_score_sum, total_games),
        'bestScore': max(values),
        'worstScore': min(values),
        'totalScoreSum': total_score_sum,
        'recentGames': [_recent_game_item(s) for s in game_scores[:RECENT_GAMES_LIMIT]],
        'monthlyStats': monthly_stats,
    }


def _page_payload(pagination, items) -> dict:
    return {
        'items': items,
        'pagination': {
            'total': pagination.total,
            'page': pagination.page,
            'limit': pagination.per_page,
            'totalPages': pagination.pages,
        },
    }


SCORE_ORDERINGS = {
    'date_desc': (Game.game_date.desc(), GameScore.created_at.desc(), GameScore.id.desc()),
    'date_asc': (Game.game_date.asc(), GameScore.created_at.asc(), GameScore.id.asc()),
    'score_desc': (GameScore.score.desc(), GameScore.id.desc()),
    'score_asc': (GameScore.score.asc(), GameScore.id.asc()),
}


def get_user_game_scores(user_id, page=1, limit=20, sort='date_desc', filters=None) -> dict:
    filters = filters or {}
    query = (
        GameScore.query
        .join(Game, GameScore.game_id == Game.id)
        .join(Club, Game.club_id == Club.id)
        .join(BowlingCenter, Game.bowling_center_id == BowlingCenter.id)
        .filter(GameScore.user_id == user_id)
    )
    if filters.get('club_name'):
        query = query.filter(Club.name.ilike(f"%{filters['club_name']}%"))
    if filters.get('bowling_center_name'):
        query = query.filter(BowlingCenter.name.ilike(f"%{filters['bowling_center_name']}%"))
    if filters.get('start_date'):
        query = query.filter(Game.game_date >= filters['start_date'])
    if filters.get('end_date'):
        # Whole end day is included
        query = query.filter(Game.game_date < filters['end_date'] + timedelta(days=1))
    if filters.get('min_score') is not None:
        query = query.filter(GameScore.score >= filters['min_score'])
    if filters.get('max_score') is not None:
        query = query.filter(GameScore.score <= filters['max_score'])

    query = query.order_by(*SCORE_ORDERINGS.get(sort, SCORE_ORDERINGS['date_desc']))
    pagination = query.paginate(page=page, per_page=limit, error_out=False)
    return _page_payload(pagination, [s.to_dict(include_game=True) for s in pagination.items])


def get_club_games(club_id, page=1, limit=20) -> dict:
    query = Game.query.filter_by(club_id=club_id).order_by(Game.game_date.desc(), Game.id.desc())
    pagination = query.paginate(page=page, per_page=limit, error_out=False)
    return _page_payload(pagination, [g.to_dict(include_scores=True) for g in pagination.items])


def get_game_scores(game_id) -> dict:
    game = db.session.get(Game, game_id)
    if not game:
        raise NotFound('게임을 찾을 수 없습니다.')
    return game.to_dict(include_scores=True)


def _owned_score(user_id, score_id, action) -> GameScore:
    game_score = db.session.get(GameScore, score_id)
    if not game_score:
        raise NotFound('게임 점수를 찾을 수 없습니다.')
    if game_score.user_id != user_id:
        raise Forbidden(f'이 점수를 {action}할 권한이 없습니다.')
    return game_score


def update_game_score(user_id, score_id, score) -> GameScore:
    game_score = _owned_score(user_id, score_id, '수정')
    game_score.score = score
    db.session.commit()
    current_app.logger.info(f"[games.score_update] score={score_id} user={user_id}")
    return game_score


def delete_game_score(user_id, score_id) -> None:
    game_score = _owned_score(user_id, score_id, '삭제')
    db.session.delete(game_score)
    db.session.commit()
    current_app.logger.info(f"[games.score_delete] score={score_id} user={user_id}")
