from liao import db, bcrypt
from liao.services.scoring.rules import GameName
from flask_login import UserMixin
from sqlalchemy.sql import func

class Team(db.Model):
    __tablename__ = 'teams'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    scores = db.relationship('Score', back_populates='team', lazy='select')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
        }

class Score(db.Model):
    """One signed point delta for one team from one game submission."""
    __tablename__ = 'scores'
    id = db.Column(db.Integer, primary_key=True)
    game_name = db.Column(db.String(32), nullable=False, index=True)
    team_id = db.Column(db.Integer, db.ForeignKey('teams.id'), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    team = db.relationship('Team', back_populates='scores')

    def to_dict(self):
        try:
            label = GameName(self.game_name).label
        except ValueError:
            label = self.game_name
        return {
            'id': self.id,
            'game_name': self.game_name,
            'game_label': label,
            'team_id': self.team_id,
            'team_name': self.team.name if self.team else '',
            'score': self.score,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

class LoginCode(UserMixin, db.Model):
    """Shared passphrase. A matching code is the whole session identity."""
    __tablename__ = 'login'
    id = db.Column(db.Integer, primary_key=True)
    code_hash = db.Column(db.String(128), nullable=False)

    def set_code(self, code):
        self.code_hash = bcrypt.generate_password_hash(code).decode('utf-8')

    def check_code(self, code):
        return bcrypt.check_password_hash(self.code_hash, code)
