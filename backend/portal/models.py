from portal import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone
import uuid


def utcnow():
    # Naive UTC; SQLite drops tzinfo so everything is stored and compared naive
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PlayerStats(db.Model):
    __tablename__ = 'player_stats'
    player_id = db.Column(db.String(128), primary_key=True)
    waves_killed = db.Column(db.Integer, default=0, nullable=False)
    zombies_killed = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'waves_killed': self.waves_killed,
            'zombies_killed': self.zombies_killed,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class VerificationCode(db.Model):
    __tablename__ = 'verification_codes'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.String(128), nullable=False, index=True)
    code = db.Column(db.String(6), nullable=False, index=True)
    used = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=True)

    def is_expired(self, now=None):
        if self.expires_at is None:
            return False
        return self.expires_at < (now or utcnow())


class User(db.Model):
    """Backing authentication identity, created on a player's first username claim."""
    __tablename__ = 'users'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    email_confirmed = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)


class Profile(db.Model):
    __tablename__ = 'profiles'
    id = db.Column(db.String(36), db.ForeignKey('users.id'), primary_key=True)
    player_id = db.Column(db.String(128), unique=True, nullable=False, index=True)
    username = db.Column(db.String(20), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    user = db.relationship('User')


class PlayerSession(UserMixin, db.Model):
    """Server-side record of a player_session cookie token."""
    __tablename__ = 'player_sessions'
    token = db.Column(db.String(36), primary_key=True)
    player_id = db.Column(db.String(128), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)

    def get_id(self):
        return self.token

    def is_live(self, now=None):
        return self.expires_at > (now or utcnow())

    def cookie_payload(self):
        return {'token': self.token, 'player_id': self.player_id}
