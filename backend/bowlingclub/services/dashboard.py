"""Dashboard aggregation.

Reads are fail-soft: a data-access error is logged and the caller gets an
empty/zeroed result instead of an error response.
"""

from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from bowlingclub import db
from bowlingclub.errors import InternalError, NotFound
from bowlingclub.models import (
    BowlingCenter, Club, ClubMember, Game, GameScore, MemberRole, utcnow,
)
from bowlingclub.services.games import require_membership, round_half_up

RECENT_GAMES_LIMIT = 5
ACTIVITY_LIMIT = 10
CLUB_GAMES_PER_FEED = 3
NEW_MEMBERS_PER_FEED = 3

PRACTICE_CLUB_NAME = '개인 연습'
DEFAULT_CENTER_NAME = '기본 볼링센터'


def empty_dashboard() -> dict:
    return {
        'totalGames': 0,
        'averageScore': 0,
        'highestScore': 0,
        'recentGames': [],
        'clubActivities': [],
        'clubMemberships': [],
    }


def _active_memberships(user_id):
    return ClubMember.query.filter_by(user_id=user_id, is_active=True).all()


def get_user_dashboard(user_id: int) -> dict:
    try:
        game_scores = (
            GameScore.query
            .filter_by(user_id=user_id)
            .order_by(GameScore.created_at.desc(), GameScore.id.desc())
            .all()
        )
        values = [s.score for s in game_scores]
        total_games = len(values)

        recent_games = [
            {
                'id': s.id,
                'totalScore': s.score,
                'gameDate': s.game.game_date.isoformat(),
                'clubName': s.game.club.name if s.game.club else PRACTICE_CLUB_NAME,
                'gameOrder': s.game_order,
            }
            for s in game_scores[:RECENT_GAMES_LIMIT]
        ]

        memberships = _active_memberships(user_id)

        return {
            'totalGames': total_games,
            'averageScore': round_half_up(sum(values), total_games),
            'highestScore': max(values) if values else 0,
            'recentGames': recent_games,
            'clubActivities': get_recent_club_activities(memberships),
            'clubMemberships': [
                {
                    'clubId': m.club.id,
                    'clubName': m.club.name,
                    'role': m.role,
                    'joinedDate': m.joined_date.isoformat(),
                }
                for m in memberships
            ],
        }
    except SQLAlchemyError:
        current_app.logger.exception(f"[dashboard] stats fetch failed user={user_id}")
        db.session.rollback()
        return empty_dashboard()


def game_activity(club: Club, top_score: GameScore, when) -> dict:
    return {
        'type': 'game',
        'title': f'{top_score.user.name}님이 {top_score.score}점을 기록했습니다',
        'description': f'{club.name} 클럽',
        'time': when,
        'icon': 'trophy',
    }


def member_activity(club: Club, member: ClubMember) -> dict:
    return {
        'type': 'member',
        'title': f'{member.user.name}님이 클럽에 가입했습니다',
        'description': f'{club.name} 클럽',
        'time': member.joined_date,
        'icon': 'user-plus',
    }


def get_recent_club_activities(memberships) -> list:
    window_days = int(current_app.config.get('NEW_MEMBER_WINDOW_DAYS', 7))
    since = utcnow() - timedelta(days=window_days)
    activities = []

    for membership in memberships:
        club = membership.club
        recent_games = (
            Game.query
            .filter_by(club_id=club.id)
            .order_by(Game.game_date.desc(), Game.id.desc())
            .limit(CLUB_GAMES_PER_FEED)
            .all()
        )
        for game in recent_games:
            top_score = (
                GameScore.query
                .filter_by(game_id=game.id)
                .order_by(GameScore.score.desc(), GameScore.id.asc())
                .first()
            )
            if top_score:
                activities.append(game_activity(club, top_score, game.game_date))

        new_members = (
            ClubMember.query
            .filter(
                ClubMember.club_id == club.id,
                ClubMember.is_active.is_(True),
                ClubMember.joined_date >= since,
            )
            .order_by(ClubMember.joined_date.desc(), ClubMember.id.desc())
            .limit(NEW_MEMBERS_PER_FEED)
            .all()
        )
        activities.extend(member_activity(club, m) for m in new_members)

    activities.sort(key=lambda a: a['time'], reverse=True)
    return [dict(a, time=a['time'].isoformat()) for a in activities[:ACTIVITY_LIMIT]]


def get_user_clubs(user_id: int) -> list:
    try:
        return [
            {
                'id': m.id,
                'clubId': m.club_id,
                'role': m.role,
                'joinedDate': m.joined_date.isoformat(),
                'club': {
                    'id': m.club.id,
                    'name': m.club.name,
                    'description': m.club.description,
                },
            }
            for m in _active_memberships(user_id)
        ]
    except SQLAlchemyError:
        current_app.logger.exception(f"[dashboard] club list failed user={user_id}")
        db.session.rollback()
        return []


def is_practice_club(club) -> bool:
    return club is not None and club.name == PRACTICE_CLUB_NAME


def _default_center() -> BowlingCenter:
    # Not guarded against concurrent first-time callers; duplicates are possible
    center = BowlingCenter.query.order_by(BowlingCenter.id.asc()).first()
    if not center:
        center = BowlingCenter(name=DEFAULT_CENTER_NAME, address='서울시 강남구', lane_count=20, parking_available=True)
        db.session.add(center)
        db.session.commit()
    return center


def _practice_club(user_id, center: BowlingCenter) -> Club:
    club = Club.query.filter_by(name=PRACTICE_CLUB_NAME).order_by(Club.id.asc()).first()
    if not club:
        club = Club(name=PRACTICE_CLUB_NAME, bowling_center_id=center.id, description='개인 연습용 클럽', club_fee=0)
        db.session.add(club)
        db.session.commit()
    membership = ClubMember.query.filter_by(user_id=user_id, club_id=club.id).first()
    if not membership:
        db.session.add(ClubMember(user_id=user_id, club_id=club.id, role=MemberRole.MEMBER))
        db.session.commit()
    elif not membership.is_active:
        membership.is_active = True
        db.session.commit()
    return club


def add_game_record(user_id, score, club_id=None, game_type=None, bowling_center_id=None) -> GameScore:
    """Quick-add a single-game record.

    Records without a club go to the shared practice club, which the caller
    joins on first use. Game and score are committed together or not at all.
    """
    try:
        if club_id is not None:
            require_membership(user_id, club_id)

        if bowling_center_id is not None:
            center = db.session.get(BowlingCenter, bowling_center_id)
            if not center:
                raise NotFound('볼링장을 찾을 수 없습니다.')
        else:
            center = _default_center()

        if club_id is None:
            club_id = _practice_club(user_id, center).id

        game = Game(
            club_id=club_id,
            bowling_center_id=center.id,
            game_date=utcnow(),
            game_type=game_type or 'practice',
        )
        db.session.add(game)
        db.session.flush()
        game_score = GameScore(game_id=game.id, user_id=user_id, score=score, game_order=1)
        db.session.add(game_score)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"[dashboard] add game record failed user={user_id}")
        raise InternalError('게임 기록 추가에 실패했습니다.')

    current_app.logger.info(f"[dashboard.add_game] score={game_score.id} game={game.id} user={user_id}")
    return game_score
