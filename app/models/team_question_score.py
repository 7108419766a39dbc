from datetime import datetime

from app.extensions import db


class TeamQuestionScore(db.Model):
    """Best-so-far passed count and score of a team on one question number."""

    __tablename__ = 'team_question_score'
    __table_args__ = (
        db.UniqueConstraint(
            'team_id', 'question_number',
            name='uq_team_question_score_team_number',
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(
        db.Integer, db.ForeignKey('team.id'), nullable=False, index=True
    )
    question_number = db.Column(db.Integer, nullable=False)
    testcases_passed = db.Column(db.Integer, nullable=False, default=0)
    score = db.Column(db.Float, nullable=False, default=0.0)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    team = db.relationship('Team', back_populates='question_scores')

    def __repr__(self) -> str:
        return (
            f'<TeamQuestionScore team={self.team_id} '
            f'q={self.question_number} score={self.score}>'
        )
