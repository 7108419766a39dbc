from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from app.errors import NotFoundError, ValidationError
from app.services.grading_service import GradingService

submission_bp = Blueprint('submission', __name__, url_prefix='/submission')


@submission_bp.route('/submit', methods=['POST'])
@login_required
def submit():
    data = request.get_json(silent=True) or {}
    code = data.get('code')
    question_id = data.get('questionid')
    if not code or question_id is None:
        raise ValidationError('Missing required fields.')
    try:
        question_id = int(question_id)
    except (TypeError, ValueError):
        raise ValidationError('questionid must be an integer.')

    outcome = GradingService().submit(current_user.id, question_id, code)
    return jsonify(outcome.to_dict())


@submission_bp.route('/<int:question_id>')
@login_required
def get_submission(question_id):
    submission = GradingService.get_submission(current_user.id, question_id)
    if submission is None:
        raise NotFoundError('No submission for this question yet.')
    return jsonify(submission.to_dict())


@submission_bp.route('/<int:question_id>/logs')
@login_required
def get_logs(question_id):
    logs = GradingService.get_logs(current_user.id, question_id)
    return jsonify({'total': len(logs), 'logs': [log.to_dict() for log in logs]})
