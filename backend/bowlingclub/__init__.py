from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import logging
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Bearer-token identity for Flask-Login
    from bowlingclub import security
    security.init_login_manager(login_manager)

    from bowlingclub.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Blueprints, all mounted under /api to match the frontend API client
    from bowlingclub.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from bowlingclub.api.auth import auth
    flask_app.register_blueprint(auth, url_prefix='/api/auth')

    from bowlingclub.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from bowlingclub.api.dashboard import dashboard
    flask_app.register_blueprint(dashboard, url_prefix='/api/dashboard')

    from bowlingclub.api.clubs import clubs
    flask_app.register_blueprint(clubs, url_prefix='/api')

    from bowlingclub.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from bowlingclub.models import User, BowlingCenter, Club, ClubMember, MemberRole
        from bowlingclub.services.passwords import hash_password
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            center = BowlingCenter(name='기본 볼링센터', address='서울시 강남구', lane_count=20, parking_available=True)
            db.session.add(center)
            db.session.flush()

            club = Club(name='강남 스트라이크', description='데모 클럽', bowling_center_id=center.id, club_fee=0)
            db.session.add(club)
            db.session.flush()

            master = User(email='master@master.com', name='마스터', password_hash=hash_password('master1234'))
            db.session.add(master)
            db.session.flush()
            db.session.add(ClubMember(user_id=master.id, club_id=club.id, role=MemberRole.MASTER))

            db.session.commit()
            click.echo('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
