from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from app.services.otp_service import OtpService

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _team_info(team):
    return {
        'id': team.id,
        'team_name': team.team_name,
        'roll_nos': team.roll_nos,
        'emails': team.emails,
        'year': team.year,
    }


@auth_bp.route('/request-login', methods=['POST'])
def request_login():
    data = request.get_json(silent=True) or {}
    OtpService.request_login(data.get('email', ''))
    return jsonify({
        'success': True,
        'message': 'OTP sent successfully to all team members',
    })


@auth_bp.route('/verify-otp', methods=['POST'])
def verify_otp():
    data = request.get_json(silent=True) or {}
    team = OtpService.verify(data.get('email', ''), str(data.get('otp') or ''))
    login_user(team, remember=True)
    return jsonify({'success': True, 'team': _team_info(team)})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'team': _team_info(current_user)})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})
