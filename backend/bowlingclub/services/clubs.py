from flask import current_app

from bowlingclub import db
from bowlingclub.errors import Conflict, NotFound
from bowlingclub.models import BowlingCenter, Club, ClubMember, MemberRole, utcnow


def get_club(club_id) -> Club:
    club = db.session.get(Club, club_id)
    if not club:
        raise NotFound('클럽을 찾을 수 없습니다.')
    return club


def create_club(user_id, name, description=None, bowling_center_id=None) -> Club:
    """Create a club; the creator becomes its master."""
    if bowling_center_id is not None and not db.session.get(BowlingCenter, bowling_center_id):
        raise NotFound('볼링장을 찾을 수 없습니다.')

    club = Club(name=name, description=description, bowling_center_id=bowling_center_id)
    db.session.add(club)
    db.session.flush()
    db.session.add(ClubMember(user_id=user_id, club_id=club.id, role=MemberRole.MASTER))
    db.session.commit()
    current_app.logger.info(f"[clubs.create] club={club.id} master={user_id}")
    return club


def join_club(user_id, club_id) -> ClubMember:
    get_club(club_id)
    membership = ClubMember.query.filter_by(user_id=user_id, club_id=club_id).first()
    if membership and membership.is_active:
        raise Conflict('이미 가입한 클럽입니다.')
    if membership:
        # Rejoining keeps the row; the join date restarts
        membership.is_active = True
        membership.role = MemberRole.MEMBER
        membership.joined_date = utcnow()
    else:
        membership = ClubMember(user_id=user_id, club_id=club_id, role=MemberRole.MEMBER)
        db.session.add(membership)
    db.session.commit()
    current_app.logger.info(f"[clubs.join] club={club_id} user={user_id}")
    return membership


def leave_club(user_id, club_id) -> None:
    membership = ClubMember.query.filter_by(user_id=user_id, club_id=club_id, is_active=True).first()
    if not membership:
        raise NotFound('가입한 클럽이 아닙니다.')
    membership.is_active = False
    db.session.commit()
    current_app.logger.info(f"[clubs.leave] club={club_id} user={user_id}")


def get_club_members(club_id) -> list:
    get_club(club_id)
    members = (
        ClubMember.query
        .filter_by(club_id=club_id, is_active=True)
        .order_by(ClubMember.joined_date.asc(), ClubMember.id.asc())
        .all()
    )
    return [m.to_dict() for m in members]


def list_bowling_centers() -> list:
    return [c.to_dict() for c in BowlingCenter.query.order_by(BowlingCenter.name.asc()).all()]


def create_bowling_center(name, address, lane_count=None, parking_available=False) -> BowlingCenter:
    center = BowlingCenter(
        name=name,
        address=address,
        lane_count=lane_count,
        parking_available=parking_available,
    )
    db.session.add(center)
    db.session.commit()
    return center
