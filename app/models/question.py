import json
from datetime import datetime

from app.extensions import db


class Question(db.Model):
    """A graded problem for one contest year."""

    __tablename__ = 'question'
    __table_args__ = (
        db.UniqueConstraint('year', 'number', name='uq_question_year_number'),
    )

    id = db.Column(db.Integer, primary_key=True)
    year = db.Column(db.Integer, nullable=False, index=True)
    number = db.Column(db.Integer, nullable=False)
    title = db.Column(db.String(200), nullable=True)
    description = db.Column(db.Text, nullable=True)
    correct_code = db.Column(db.Text, nullable=False)
    incorrect_code = db.Column(db.Text, nullable=False)
    test_cases_json = db.Column(db.Text, nullable=False, default='[]')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    submissions = db.relationship('Submission', back_populates='question', lazy='dynamic')

    @property
    def test_cases(self):
        """Ordered list of ``{'input', 'expectedOutput'}`` dicts."""
        if self.test_cases_json:
            try:
                return json.loads(self.test_cases_json)
            except (json.JSONDecodeError, TypeError):
                return []
        return []

    @test_cases.setter
    def test_cases(self, value):
        self.test_cases_json = json.dumps(
            [
                {'input': tc['input'], 'expectedOutput': tc['expectedOutput']}
                for tc in value or []
            ],
            ensure_ascii=False,
        )

    def to_dict(self, include_solution=False):
        data = {
            'id': self.id,
            'year': self.year,
            'number': self.number,
            'title': self.title,
            'description': self.description,
            'incorrect_code': self.incorrect_code,
            'test_cases': self.test_cases,
        }
        if include_solution:
            data['correct_code'] = self.correct_code
        return data

    def __repr__(self) -> str:
        return f'<Question {self.year}#{self.number} {self.title!r}>'
