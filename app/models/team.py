from __future__ import annotations

import json
from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from app.extensions import db, login_manager


class Team(UserMixin, db.Model):
    """A competing team; logs in with a one-time password mailed to its members."""

    __tablename__ = 'team'

    id = db.Column(db.Integer, primary_key=True)
    team_name = db.Column(db.String(120), unique=True, nullable=False, index=True)
    emails_json = db.Column(db.Text, nullable=False, default='[]')
    roll_nos_json = db.Column(db.Text, nullable=False, default='[]')
    year = db.Column(db.Integer, nullable=False, index=True)
    score = db.Column(db.Float, nullable=False, default=0.0)
    otp_hash = db.Column(db.String(256), nullable=True)
    otp_generated_at = db.Column(db.DateTime, nullable=True)
    otp_expires_at = db.Column(db.DateTime, nullable=True)
    otp_attempts = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    submissions = db.relationship('Submission', back_populates='team', lazy='dynamic')
    question_scores = db.relationship(
        'TeamQuestionScore',
        back_populates='team',
        cascade='all, delete-orphan',
        order_by='TeamQuestionScore.question_number',
    )

    # ------------------------------------------------------------------
    # JSON-backed list columns
    # ------------------------------------------------------------------

    @property
    def emails(self) -> list[str]:
        return json.loads(self.emails_json) if self.emails_json else []

    @emails.setter
    def emails(self, value: list[str]) -> None:
        self.emails_json = json.dumps([e.strip().lower() for e in value or []])

    @property
    def roll_nos(self) -> list[str]:
        return json.loads(self.roll_nos_json) if self.roll_nos_json else []

    @roll_nos.setter
    def roll_nos(self, value: list[str]) -> None:
        self.roll_nos_json = json.dumps(list(value or []))

    # ------------------------------------------------------------------
    # Per-question score views
    # ------------------------------------------------------------------

    def _padded(self, attr: str) -> list:
        rows = self.question_scores
        if not rows:
            return []
        width = max(r.question_number for r in rows)
        values = [0] * width
        for r in rows:
            values[r.question_number - 1] = getattr(r, attr)
        return values

    @property
    def testcases_passed(self) -> list[int]:
        """Best passed count per question, indexed by ``number - 1``."""
        return self._padded('testcases_passed')

    @property
    def testcases_score(self) -> list[float]:
        """Best score per question, indexed by ``number - 1``."""
        return self._padded('score')

    # ------------------------------------------------------------------
    # One-time password
    # ------------------------------------------------------------------

    def set_otp(self, otp: str, generated_at: datetime, expires_at: datetime) -> None:
        self.otp_hash = generate_password_hash(otp)
        self.otp_generated_at = generated_at
        self.otp_expires_at = expires_at
        self.otp_attempts = 0

    def check_otp(self, otp: str) -> bool:
        if not self.otp_hash:
            return False
        return check_password_hash(self.otp_hash, otp)

    def clear_otp(self) -> None:
        self.otp_hash = None
        self.otp_generated_at = None
        self.otp_expires_at = None
        self.otp_attempts = 0

    @classmethod
    def find_by_email(cls, email: str) -> Team | None:
        """Return the team that lists *email* among its members."""
        email = (email or '').strip().lower()
        if not email:
            return None
        candidates = cls.query.filter(cls.emails_json.contains(f'"{email}"')).all()
        for team in candidates:
            if email in team.emails:
                return team
        return None

    def to_standing(self) -> dict:
        return {
            'team_id': self.id,
            'team_name': self.team_name,
            'score': self.score,
            'year': self.year,
            'testcases_passed': self.testcases_passed,
        }

    def __repr__(self) -> str:
        return f'<Team {self.team_name!r} year={self.year} score={self.score}>'


@login_manager.user_loader
def load_team(team_id: str) -> Team | None:
    """Flask-Login user loader callback."""
    return db.session.get(Team, int(team_id))
