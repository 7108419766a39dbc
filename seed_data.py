"""Seed teams and questions from a JSON file.
Run with: python seed_data.py contest.json

The file looks like::

    {
      "teams": [
        {"team_name": "...", "emails": ["..."], "roll_nos": ["..."], "year": 2}
      ],
      "questions": [
        {"year": 2, "title": "...", "description": "...",
         "correct_code": "...", "incorrect_code": "...",
         "test_cases": [{"input": "1 2", "expectedOutput": "3"}]}
      ]
    }

Questions are numbered per year in file order, after any existing ones.
"""
import json
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app import create_app
from app.extensions import db
from app.models import Question, Team


def seed_teams(teams):
    added = 0
    for team_data in teams:
        if Team.query.filter_by(team_name=team_data['team_name']).first():
            print(f"Team {team_data['team_name']!r} already exists. Skipping.")
            continue
        clash = next(
            (e for e in team_data.get('emails', []) if Team.find_by_email(e)), None
        )
        if clash:
            print(f"Email {clash} is already registered with another team. Skipping "
                  f"{team_data['team_name']!r}.")
            continue
        team = Team(team_name=team_data['team_name'], year=team_data['year'])
        team.emails = team_data.get('emails', [])
        team.roll_nos = team_data.get('roll_nos', [])
        db.session.add(team)
        db.session.flush()
        added += 1
    return added


def seed_questions(questions):
    added = 0
    for q_data in questions:
        if not q_data.get('test_cases'):
            print(f"Question {q_data.get('title')!r} has no test cases. Skipping.")
            continue
        year = q_data['year']
        number = Question.query.filter_by(year=year).count() + 1
        question = Question(
            year=year,
            number=number,
            title=q_data.get('title'),
            description=q_data.get('description'),
            correct_code=q_data['correct_code'],
            incorrect_code=q_data['incorrect_code'],
        )
        question.test_cases = q_data['test_cases']
        db.session.add(question)
        db.session.flush()
        added += 1
    return added


def seed(path):
    with open(path, encoding='utf-8') as f:
        data = json.load(f)

    app = create_app()
    with app.app_context():
        teams = seed_teams(data.get('teams', []))
        questions = seed_questions(data.get('questions', []))
        db.session.commit()
        print(f"Seeded {teams} team(s) and {questions} question(s).")


if __name__ == '__main__':
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    seed(sys.argv[1])
