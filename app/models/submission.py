from datetime import datetime

from app.extensions import db


class Submission(db.Model):
    """Latest state of one team's work on one question."""

    __tablename__ = 'submission'
    __table_args__ = (
        db.UniqueConstraint(
            'team_id', 'question_id',
            name='uq_submission_team_question',
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(
        db.Integer,
        db.ForeignKey('team.id'),
        nullable=False,
        index=True,
    )
    question_id = db.Column(
        db.Integer,
        db.ForeignKey('question.id'),
        nullable=False,
        index=True,
    )
    code = db.Column(db.Text, nullable=False, default='')
    testcases_passed = db.Column(db.Integer, nullable=False, default=0)
    all_passed = db.Column(db.Boolean, nullable=False, default=False)
    syntax_error = db.Column(db.Integer, nullable=False, default=0)
    wrong_submission = db.Column(db.Integer, nullable=False, default=0)
    score = db.Column(db.Float, nullable=False, default=0.0)  # awarded on solve
    solved_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    team = db.relationship('Team', back_populates='submissions')
    question = db.relationship('Question', back_populates='submissions')
    logs = db.relationship(
        'SubmissionLog',
        back_populates='submission',
        lazy='dynamic',
        order_by='SubmissionLog.created_at.desc()',
    )

    @property
    def state(self) -> str:
        return 'SOLVED' if self.all_passed else 'ATTEMPTING'

    def to_dict(self):
        return {
            'id': self.id,
            'team_id': self.team_id,
            'question_id': self.question_id,
            'code': self.code,
            'testcases_passed': self.testcases_passed,
            'all_passed': self.all_passed,
            'syntax_error': self.syntax_error,
            'wrong_submission': self.wrong_submission,
            'score': self.score,
            'state': self.state,
            'solved_at': self.solved_at.isoformat() if self.solved_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return (
            f'<Submission team={self.team_id} question={self.question_id} '
            f'passed={self.testcases_passed} all_passed={self.all_passed}>'
        )
