import logging

from flask import Blueprint, jsonify
from flask_socketio import emit, join_room, leave_room

from app.services.leaderboard_service import (
    LEADERBOARD_EVENT, LeaderboardService, leaderboard_room,
)

logger = logging.getLogger(__name__)

leaderboard_bp = Blueprint('leaderboard', __name__, url_prefix='/leaderboard')


@leaderboard_bp.route('/<int:year>')
def standings(year):
    return jsonify({'year': year, 'standings': LeaderboardService.get_standings(year)})


def _parse_year(data):
    try:
        return int((data or {}).get('year'))
    except (TypeError, ValueError, AttributeError):
        return None


def handle_join_leaderboard(data):
    year = _parse_year(data)
    if year is None:
        logger.warning(f'join_leaderboard without a valid year: {data!r}')
        return {'success': False, 'error': 'year is required'}

    join_room(leaderboard_room(year))
    emit(LEADERBOARD_EVENT, {'year': year, 'standings': LeaderboardService.get_standings(year)})
    return {'success': True}


def handle_leave_leaderboard(data):
    year = _parse_year(data)
    if year is not None:
        leave_room(leaderboard_room(year))


def register_socket_handlers(socketio):
    """Attach leaderboard events to the server created by ``init_app``."""
    socketio.on_event('join_leaderboard', handle_join_leaderboard)
    socketio.on_event('leave_leaderboard', handle_leave_leaderboard)
