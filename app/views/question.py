from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from app.errors import ForbiddenError, NotFoundError
from app.extensions import db
from app.models import Question

question_bp = Blueprint('question', __name__, url_prefix='/question')


@question_bp.route('/')
@login_required
def list_questions():
    """Questions of the logged-in team's year, in contest order."""
    questions = (
        Question.query.filter_by(year=current_user.year)
        .order_by(Question.number.asc())
        .all()
    )
    return jsonify([
        {'id': q.id, 'number': q.number, 'title': q.title}
        for q in questions
    ])


@question_bp.route('/<int:question_id>')
@login_required
def get_question(question_id):
    question = db.session.get(Question, question_id)
    if question is None:
        raise NotFoundError('Question not found')
    if question.year != current_user.year:
        raise ForbiddenError('Access denied. Question is not for your year.')
    return jsonify(question.to_dict())
