"""Shared test fixtures for the contest backend test suite."""

import pytest

from app import create_app
from app.extensions import db as _db
from app.models import Question, Team
from app.services.compiler_client import TestResult

TEST_CASES = [
    {'input': '1 2', 'expectedOutput': '3'},
    {'input': '2 2', 'expectedOutput': '4'},
    {'input': '5 7', 'expectedOutput': '12'},
]


def _make_results(*passed, outputs=None):
    outputs = outputs or [''] * len(passed)
    return [TestResult(passed=p, actual_output=o) for p, o in zip(passed, outputs)]


@pytest.fixture()
def make_results():
    """Build compiler results; ``make_results(True, False)`` -> 2 results."""
    return _make_results


@pytest.fixture()
def app():
    """Create a Flask application configured for testing."""
    application = create_app('testing')
    yield application


@pytest.fixture()
def db(app):
    """Provide a clean database for each test."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def client(app, db):
    """Provide a Flask test client."""
    return app.test_client()


@pytest.fixture()
def sample_data(app, db):
    """Create two teams and questions for testing.

    Returns a dict of plain IDs (not model objects) so they survive
    across Flask request context boundaries without DetachedInstanceError.
    """
    team = Team(team_name='Segfaults', year=2)
    team.emails = ['alice@example.com', 'bob@example.com']
    team.roll_nos = ['21CS001', '21CS002']
    other = Team(team_name='Off By One', year=2)
    other.emails = ['carol@example.com']
    other.roll_nos = ['21CS003']
    senior = Team(team_name='Seniors', year=3)
    senior.emails = ['dave@example.com']
    db.session.add_all([team, other, senior])
    db.session.flush()

    q1 = Question(
        year=2, number=1, title='Sum',
        description='Print the sum of two integers.',
        correct_code='a, b = map(int, input().split())\nprint(a + b)',
        incorrect_code='a, b = map(int, input().split())\nprint(a - b)',
    )
    q1.test_cases = TEST_CASES
    q2 = Question(
        year=2, number=2, title='Double',
        description='Print twice the input.',
        correct_code='print(2 * int(input()))',
        incorrect_code='print(int(input()))',
    )
    q2.test_cases = [{'input': '2', 'expectedOutput': '4'}]
    q_senior = Question(
        year=3, number=1, title='Senior only',
        correct_code='print(1)', incorrect_code='print(0)',
    )
    q_senior.test_cases = [{'input': '', 'expectedOutput': '1'}]
    q_empty = Question(
        year=2, number=3, title='No tests yet',
        correct_code='pass', incorrect_code='pass',
    )
    q_empty.test_cases = []
    db.session.add_all([q1, q2, q_senior, q_empty])
    db.session.commit()

    return {
        'team_id': team.id,
        'other_team_id': other.id,
        'senior_team_id': senior.id,
        'q1_id': q1.id,
        'q2_id': q2.id,
        'senior_question_id': q_senior.id,
        'empty_question_id': q_empty.id,
    }


@pytest.fixture()
def team_client(app, db, client, sample_data):
    """Provide a client logged in as the sample_data team."""
    with client.session_transaction() as sess:
        sess['_user_id'] = str(sample_data['team_id'])
        sess['_fresh'] = True
    return client, sample_data


@pytest.fixture()
def admin_headers(app):
    return {'X-Admin-Token': app.config['ADMIN_TOKEN']}
