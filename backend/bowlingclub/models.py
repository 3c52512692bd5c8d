from bowlingclub import db
from flask_login import UserMixin
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class MemberRole:
    MASTER = 'MASTER'
    SUB_MASTER = 'SUB_MASTER'
    MEMBER = 'MEMBER'

    ALL = (MASTER, SUB_MASTER, MEMBER)


GAME_TYPES = ('practice', 'league', 'tournament', 'casual')


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    phone_number = db.Column(db.String(32), nullable=True)
    profile_image_url = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    memberships = db.relationship('ClubMember', back_populates='user', lazy='dynamic')
    scores = db.relationship('GameScore', back_populates='user', lazy='dynamic')

    def to_dict(self):
        # Public fields only; the password hash never leaves the model
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'phoneNumber': self.phone_number,
            'profileImageUrl': self.profile_image_url,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class BowlingCenter(db.Model):
    __tablename__ = 'bowling_center'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    address = db.Column(db.String(255), nullable=False, default='')
    lane_count = db.Column(db.Integer, nullable=True)
    parking_available = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'address': self.address,
            'laneCount': self.lane_count,
            'parkingAvailable': self.parking_available,
        }


class Club(db.Model):
    __tablename__ = 'club'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    bowling_center_id = db.Column(db.Integer, db.ForeignKey('bowling_center.id'), nullable=True)
    club_fee = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    bowling_center = db.relationship('BowlingCenter')
    members = db.relationship('ClubMember', back_populates='club', lazy='dynamic')
    games = db.relationship('Game', back_populates='club', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'bowlingCenterId': self.bowling_center_id,
            'clubFee': self.club_fee,
            'createdAt': _iso(self.created_at),
        }


class ClubMember(db.Model):
    __tablename__ = 'club_member'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'club_id', name='uq_club_member_user_club'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    club_id = db.Column(db.Integer, db.ForeignKey('club.id'), nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False, default=MemberRole.MEMBER)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    joined_date = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship('User', back_populates='memberships')
    club = db.relationship('Club', back_populates='members')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'userName': self.user.name if self.user else None,
            'clubId': self.club_id,
            'role': self.role,
            'isActive': self.is_active,
            'joinedDate': _iso(self.joined_date),
        }


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    club_id = db.Column(db.Integer, db.ForeignKey('club.id'), nullable=False, index=True)
    bowling_center_id = db.Column(db.Integer, db.ForeignKey('bowling_center.id'), nullable=False)
    game_date = db.Column(db.DateTime, nullable=False, index=True)
    game_type = db.Column(db.String(16), nullable=True)  # practice, league, tournament, casual
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    club = db.relationship('Club', back_populates='games')
    bowling_center = db.relationship('BowlingCenter')
    scores = db.relationship(
        'GameScore',
        back_populates='game',
        cascade='all, delete-orphan',
        order_by='desc(GameScore.score)',
    )

    def to_dict(self, include_scores=False):
        data = {
            'id': self.id,
            'clubId': self.club_id,
            'bowlingCenterId': self.bowling_center_id,
            'gameDate': _iso(self.game_date),
            'gameType': self.game_type,
            'createdAt': _iso(self.created_at),
            'club': {'id': self.club.id, 'name': self.club.name} if self.club else None,
            'bowlingCenter': {
                'id': self.bowling_center.id,
                'name': self.bowling_center.name,
                'address': self.bowling_center.address,
            } if self.bowling_center else None,
        }
        if include_scores:
            data['scores'] = [s.to_dict(include_user=True) for s in self.scores]
        return data


class GameScore(db.Model):
    __tablename__ = 'game_score'
    __table_args__ = (
        db.CheckConstraint('score >= 0 AND score <= 300', name='ck_game_score_range'),
        db.CheckConstraint('game_order >= 1', name='ck_game_score_order'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False)
    game_order = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    game = db.relationship('Game', back_populates='scores')
    user = db.relationship('User', back_populates='scores')

    def to_dict(self, include_user=False, include_game=False):
        data = {
            'id': self.id,
            'gameId': self.game_id,
            'userId': self.user_id,
            'score': self.score,
            'gameOrder': self.game_order,
            'createdAt': _iso(self.created_at),
        }
        if include_user and self.user:
            data['user'] = {'id': self.user.id, 'name': self.user.name}
        if include_game and self.game:
            data['game'] = self.game.to_dict()
        return data
