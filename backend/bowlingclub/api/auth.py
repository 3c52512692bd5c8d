from flask import Blueprint
from flask_login import login_required, current_user

from bowlingclub.api import envelope
from bowlingclub.services import auth as auth_service
from bowlingclub.validators import get_json_body, validate_register, validate_login

auth = Blueprint('auth', __name__)

REGISTER_FIELDS = ('email', 'password', 'name', 'phoneNumber', 'profileImageUrl')
LOGIN_FIELDS = ('email', 'password')


@auth.route('/register', methods=['POST'])
def register():
    data = validate_register(get_json_body(REGISTER_FIELDS))
    result = auth_service.register(**data)
    return envelope(result, '회원가입이 완료되었습니다.', 201)


@auth.route('/login', methods=['POST'])
def login():
    data = validate_login(get_json_body(LOGIN_FIELDS))
    result = auth_service.login(data['email'], data['password'])
    return envelope(result, '로그인이 완료되었습니다.')


@auth.route('/profile', methods=['GET'])
@auth.route('/me', methods=['GET'])
@login_required
def profile():
    return envelope(auth_service.get_profile(current_user.id), '프로필 조회가 완료되었습니다.')
