"""Tests for database models: constraints, JSON columns and derived views."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from app.extensions import db
from app.models import (
    Question, Submission, SubmissionLog, SubmissionStatus, Team, TeamQuestionScore,
)


# ──────────────────────────────────────────────
# Team model
# ──────────────────────────────────────────────

class TestTeam:
    def test_emails_normalized(self, app, db):
        team = Team(team_name='T', year=1)
        team.emails = [' Alice@Example.com ', 'bob@example.com']
        db.session.add(team)
        db.session.commit()
        assert team.emails == ['alice@example.com', 'bob@example.com']

    def test_find_by_email(self, app, db, sample_data):
        team = Team.find_by_email('ALICE@example.com')
        assert team is not None
        assert team.id == sample_data['team_id']
        assert Team.find_by_email('nobody@example.com') is None
        assert Team.find_by_email('') is None

    def test_find_by_email_is_exact(self, app, db, sample_data):
        assert Team.find_by_email('lice@example.com') is None

    def test_unique_team_name(self, app, db):
        db.session.add(Team(team_name='dup', year=1))
        db.session.commit()
        db.session.add(Team(team_name='dup', year=2))
        with pytest.raises(IntegrityError):
            db.session.commit()

    def test_otp_roundtrip(self, app, db):
        team = Team(team_name='otp', year=1)
        now = datetime.utcnow()
        team.set_otp('123456', now, now + timedelta(minutes=5))
        assert team.otp_hash != '123456'
        assert team.check_otp('123456')
        assert not team.check_otp('654321')
        team.clear_otp()
        assert not team.check_otp('123456')
        assert team.otp_expires_at is None

    def test_score_arrays_empty_by_default(self, app, db, sample_data):
        team = db.session.get(Team, sample_data['team_id'])
        assert team.testcases_passed == []
        assert team.testcases_score == []
        assert team.score == 0

    def test_score_arrays_zero_padded(self, app, db, sample_data):
        team_id = sample_data['team_id']
        db.session.add(TeamQuestionScore(
            team_id=team_id, question_number=3, testcases_passed=4, score=12.5,
        ))
        db.session.commit()
        team = db.session.get(Team, team_id)
        assert team.testcases_passed == [0, 0, 4]
        assert team.testcases_score == [0, 0, 12.5]

    def test_to_standing(self, app, db, sample_data):
        team = db.session.get(Team, sample_data['team_id'])
        standing = team.to_standing()
        assert standing['team_name'] == 'Segfaults'
        assert standing['year'] == 2
        assert standing['score'] == 0
        assert standing['testcases_passed'] == []


# ──────────────────────────────────────────────
# Question model
# ──────────────────────────────────────────────

class TestQuestion:
    def test_test_cases_roundtrip(self, app, db, sample_data):
        question = db.session.get(Question, sample_data['q1_id'])
        assert len(question.test_cases) == 3
        assert question.test_cases[0] == {'input': '1 2', 'expectedOutput': '3'}

    def test_unique_year_number(self, app, db, sample_data):
        dup = Question(year=2, number=1, correct_code='x', incorrect_code='y')
        dup.test_cases = [{'input': '', 'expectedOutput': ''}]
        db.session.add(dup)
        with pytest.raises(IntegrityError):
            db.session.commit()

    def test_same_number_other_year(self, app, db, sample_data):
        q = Question(year=4, number=1, correct_code='x', incorrect_code='y')
        q.test_cases = [{'input': '', 'expectedOutput': ''}]
        db.session.add(q)
        db.session.commit()
        assert q.id is not None

    def test_to_dict_hides_solution(self, app, db, sample_data):
        question = db.session.get(Question, sample_data['q1_id'])
        assert 'correct_code' not in question.to_dict()
        assert 'correct_code' in question.to_dict(include_solution=True)


# ──────────────────────────────────────────────
# Submission / SubmissionLog models
# ──────────────────────────────────────────────

class TestSubmission:
    def test_one_row_per_team_question(self, app, db, sample_data):
        db.session.add(Submission(
            team_id=sample_data['team_id'], question_id=sample_data['q1_id'], code='a',
        ))
        db.session.commit()
        db.session.add(Submission(
            team_id=sample_data['team_id'], question_id=sample_data['q1_id'], code='b',
        ))
        with pytest.raises(IntegrityError):
            db.session.commit()

    def test_defaults(self, app, db, sample_data):
        sub = Submission(
            team_id=sample_data['team_id'], question_id=sample_data['q1_id'], code='a',
        )
        db.session.add(sub)
        db.session.commit()
        assert sub.testcases_passed == 0
        assert sub.all_passed is False
        assert sub.syntax_error == 0
        assert sub.wrong_submission == 0
        assert sub.state == 'ATTEMPTING'
        assert sub.created_at is not None

    def test_logs_most_recent_first(self, app, db, sample_data):
        sub = Submission(
            team_id=sample_data['team_id'], question_id=sample_data['q1_id'], code='a',
        )
        db.session.add(sub)
        db.session.flush()
        now = datetime.utcnow()
        db.session.add_all([
            SubmissionLog(submission_id=sub.id, status=SubmissionStatus.SYNTAX_ERROR.value,
                          created_at=now - timedelta(minutes=2)),
            SubmissionLog(submission_id=sub.id, status=SubmissionStatus.ACCEPTED.value,
                          created_at=now),
        ])
        db.session.commit()
        statuses = [log.status for log in sub.logs.all()]
        assert statuses == ['accepted', 'syntax error']
