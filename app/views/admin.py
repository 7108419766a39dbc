import hmac
import logging
from functools import wraps

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from app.errors import ForbiddenError, NotFoundError, ValidationError
from app.extensions import db
from app.models import Question
from app.services.grading_service import GradingService
from app.services.leaderboard_service import LeaderboardService

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')

_QUESTION_FIELDS = ('title', 'description', 'correct_code', 'incorrect_code')


def admin_required(f):
    """Require the ``X-Admin-Token`` header to match ``ADMIN_TOKEN``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get('ADMIN_TOKEN') or ''
        given = request.headers.get('X-Admin-Token', '')
        if not expected or not hmac.compare_digest(given, expected):
            raise ForbiddenError('Admin access required.')
        return f(*args, **kwargs)
    return decorated_function


def _validate_test_cases(test_cases):
    if (
        not isinstance(test_cases, list)
        or not test_cases
        or not all(
            isinstance(tc, dict)
            and isinstance(tc.get('input'), str)
            and isinstance(tc.get('expectedOutput'), str)
            for tc in test_cases
        )
    ):
        raise ValidationError(
            'test_cases must be a non-empty list of {input, expectedOutput} strings'
        )


@admin_bp.route('/questions')
@admin_required
def list_questions():
    year = request.args.get('year', type=int)
    query = Question.query
    if year is not None:
        query = query.filter_by(year=year)
    questions = query.order_by(Question.year.asc(), Question.number.asc()).all()
    return jsonify({
        'success': True,
        'questions': [q.to_dict(include_solution=True) for q in questions],
    })


@admin_bp.route('/questions', methods=['POST'])
@admin_required
def add_question():
    data = request.get_json(silent=True) or {}
    year = data.get('year')
    if (
        not isinstance(year, int)
        or not isinstance(data.get('correct_code'), str)
        or not isinstance(data.get('incorrect_code'), str)
    ):
        raise ValidationError(
            'Missing or invalid required fields: year, correct_code, incorrect_code, test_cases'
        )
    _validate_test_cases(data.get('test_cases'))

    # Numbers are assigned in creation order within a year.
    number = Question.query.filter_by(year=year).count() + 1
    question = Question(
        year=year,
        number=number,
        title=data.get('title'),
        description=data.get('description'),
        correct_code=data['correct_code'],
        incorrect_code=data['incorrect_code'],
    )
    question.test_cases = data['test_cases']
    db.session.add(question)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError(f'Question number {number} already exists for year {year}.')

    logger.info(f'Added question {question.id} (year={year} number={number})')
    return jsonify(question.to_dict(include_solution=True)), 201


@admin_bp.route('/questions/<int:question_id>', methods=['PUT'])
@admin_required
def update_question(question_id):
    question = db.session.get(Question, question_id)
    if question is None:
        raise NotFoundError('Question not found')

    data = request.get_json(silent=True) or {}
    for name in _QUESTION_FIELDS:
        if name in data:
            if not isinstance(data[name], str):
                raise ValidationError(f'{name} must be a string')
            setattr(question, name, data[name])
    if 'test_cases' in data:
        _validate_test_cases(data['test_cases'])
        question.test_cases = data['test_cases']
    db.session.commit()

    logger.info(f'Updated question {question.id}')
    return jsonify(question.to_dict(include_solution=True))


@admin_bp.route('/questions/<int:question_id>/check', methods=['POST'])
@admin_required
def check_question(question_id):
    return jsonify(GradingService().check_reference_solution(question_id))


@admin_bp.route('/teams/<int:team_id>/rebuild-score', methods=['POST'])
@admin_required
def rebuild_team_score(team_id):
    team = LeaderboardService.rebuild_team_score(team_id)
    try:
        LeaderboardService.notify_score_changed(team.year)
    except Exception as e:
        logger.error(f'Leaderboard broadcast failed for year {team.year}: {e}')
    return jsonify({'success': True, 'team': team.to_standing()})
