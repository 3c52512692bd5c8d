import os
import sys
from datetime import datetime
import pytest
from flask import g

# Ensure the backend root (containing the `bowlingclub` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from bowlingclub import create_app, db, socketio
from bowlingclub.models import User, BowlingCenter, Club, ClubMember, Game, GameScore, MemberRole
from bowlingclub.services.passwords import hash_password
from bowlingclub.services.tokens import issue_token


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    JWT_SECRET = 'test-jwt-secret'
    JWT_EXPIRES_IN_SEC = 3600
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Lowest bcrypt cost keeps the suite fast
    BCRYPT_LOG_ROUNDS = 4
    CORS_ORIGINS = ['http://localhost:3000']
    DEFAULT_PAGE_LIMIT = 20
    MAX_PAGE_LIMIT = 100
    NEW_MEMBER_WINDOW_DAYS = 7
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    @application.before_request
    def _reset_request_identity():
        # The fixture holds one app context open, so `g` outlives each request
        g.pop('_login_user', None)
        g.pop('auth_error', None)

    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_user(flask_app):
    counter = {'n': 0}

    def _make(email=None, name='Bowler', password='secret123'):
        counter['n'] += 1
        user = User(
            email=email or f"bowler{counter['n']}@strike.com",
            name=name,
            password_hash=hash_password(password),
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture()
def auth_headers(flask_app):
    def _headers(user):
        return {'Authorization': f'Bearer {issue_token(user.id, user.email)}'}
    return _headers


@pytest.fixture()
def center(flask_app):
    c = BowlingCenter(name='스타 볼링장', address='서울시 마포구', lane_count=24)
    db.session.add(c)
    db.session.commit()
    return c


@pytest.fixture()
def make_club(flask_app, center):
    def _make(name='강남 스트라이크', members=(), master=None):
        club = Club(name=name, bowling_center_id=center.id)
        db.session.add(club)
        db.session.flush()
        if master is not None:
            db.session.add(ClubMember(user_id=master.id, club_id=club.id, role=MemberRole.MASTER))
        for user in members:
            db.session.add(ClubMember(user_id=user.id, club_id=club.id, role=MemberRole.MEMBER))
        db.session.commit()
        return club
    return _make


@pytest.fixture()
def make_game(flask_app, center):
    def _make(club, game_date=None, game_type=None, bowling_center=None):
        game = Game(
            club_id=club.id,
            bowling_center_id=(bowling_center or center).id,
            game_date=game_date or datetime(2025, 3, 1, 19, 0),
            game_type=game_type,
        )
        db.session.add(game)
        db.session.commit()
        return game
    return _make


@pytest.fixture()
def add_score(flask_app):
    def _add(game, user, score, game_order=1):
        gs = GameScore(game_id=game.id, user_id=user.id, score=score, game_order=game_order)
        db.session.add(gs)
        db.session.commit()
        return gs
    return _add


@pytest.fixture()
def ws_client(flask_app):
    clients = []

    def _connect(token=None):
        auth = {'token': token} if token is not None else None
        test_client = socketio.test_client(flask_app, namespace='/ws', auth=auth)
        clients.append(test_client)
        return test_client
    yield _connect
    for c in clients:
        try:
            if c.is_connected('/ws'):
                c.disconnect(namespace='/ws')
        except Exception:
            pass
