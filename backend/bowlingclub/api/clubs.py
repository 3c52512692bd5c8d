from flask import Blueprint
from flask_login import login_required, current_user

from bowlingclub.api import envelope
from bowlingclub.services import clubs as club_service
from bowlingclub.validators import get_json_body, validate_create_club, validate_create_center

clubs = Blueprint('clubs', __name__)


@clubs.route('/clubs', methods=['POST'])
@login_required
def create_club():
    data = validate_create_club(get_json_body(('name', 'description', 'bowlingCenterId')))
    club = club_service.create_club(current_user.id, **data)
    return envelope(club.to_dict(), '클럽이 생성되었습니다.', 201)


@clubs.route('/clubs/<int:club_id>/join', methods=['POST'])
@login_required
def join_club(club_id):
    membership = club_service.join_club(current_user.id, club_id)
    return envelope(membership.to_dict(), '클럽에 가입되었습니다.', 201)


@clubs.route('/clubs/<int:club_id>/leave', methods=['POST'])
@login_required
def leave_club(club_id):
    club_service.leave_club(current_user.id, club_id)
    return envelope(message='클럽에서 탈퇴했습니다.')


@clubs.route('/clubs/<int:club_id>/members', methods=['GET'])
@login_required
def club_members(club_id):
    return envelope(club_service.get_club_members(club_id), '클럽 멤버 조회가 완료되었습니다.')


@clubs.route('/bowling-centers', methods=['GET'])
@login_required
def list_centers():
    return envelope(club_service.list_bowling_centers(), '볼링장 목록 조회가 완료되었습니다.')


@clubs.route('/bowling-centers', methods=['POST'])
@login_required
def create_center():
    data = validate_create_center(get_json_body(('name', 'address', 'laneCount', 'parkingAvailable')))
    center = club_service.create_bowling_center(**data)
    return envelope(center.to_dict(), '볼링장이 등록되었습니다.', 201)
