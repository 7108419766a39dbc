from datetime import datetime
from enum import Enum

from app.extensions import db


class SubmissionStatus(str, Enum):
    WRONG_SUBMISSION = 'wrong submission'
    SYNTAX_ERROR = 'syntax error'
    ACCEPTED = 'accepted'


class SubmissionLog(db.Model):
    """Append-only record of one grading attempt."""

    __tablename__ = 'submission_log'

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(
        db.Integer,
        db.ForeignKey('submission.id'),
        nullable=False,
        index=True,
    )
    status = db.Column(db.String(20), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    submission = db.relationship('Submission', back_populates='logs')

    def to_dict(self):
        return {
            'id': self.id,
            'submission_id': self.submission_id,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f'<SubmissionLog submission={self.submission_id} status={self.status!r}>'
