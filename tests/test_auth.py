"""Tests for OTP login: request, verify, logout, permissions."""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from app.extensions import db
from app.models import Team
from app.services.otp_service import OtpService, generate_otp


@pytest.fixture()
def sent_otps():
    """Capture OTP mails instead of sending them."""
    sent = []
    with patch.object(OtpService, 'deliver', side_effect=lambda to, otp, exp: sent.append((to, otp))):
        yield sent


class TestGenerateOtp:
    def test_six_digits(self):
        otp = generate_otp()
        assert len(otp) == 6
        assert otp.isdigit()


class TestRequestLogin:
    def test_sends_to_every_member(self, app, client, sample_data, sent_otps):
        resp = client.post('/auth/request-login', json={'email': 'alice@example.com'})
        assert resp.status_code == 200
        assert resp.get_json()['success'] is True
        assert sorted(to for to, _ in sent_otps) == ['alice@example.com', 'bob@example.com']
        assert len({otp for _, otp in sent_otps}) == 1

        with app.app_context():
            team = db.session.get(Team, sample_data['team_id'])
            assert team.otp_hash is not None
            expiry = team.otp_expires_at - team.otp_generated_at
            assert expiry == timedelta(minutes=app.config['OTP_EXPIRY_MINUTES'])

    def test_missing_email(self, client, sample_data, sent_otps):
        resp = client.post('/auth/request-login', json={})
        assert resp.status_code == 400
        assert resp.get_json()['kind'] == 'validation'
        assert sent_otps == []

    def test_unknown_email(self, client, sample_data, sent_otps):
        resp = client.post('/auth/request-login', json={'email': 'ghost@example.com'})
        assert resp.status_code == 404

    def test_mail_failure_reported(self, client, sample_data):
        with patch.object(OtpService, 'deliver', side_effect=OSError('connection refused')):
            resp = client.post('/auth/request-login', json={'email': 'alice@example.com'})
        assert resp.status_code == 500
        assert resp.get_json()['error'] == 'Failed to send OTP email'


class TestVerifyOtp:
    def _request(self, client, sent_otps, email='alice@example.com'):
        client.post('/auth/request-login', json={'email': email})
        return sent_otps[-1][1]

    def test_verify_logs_in(self, app, client, sample_data, sent_otps):
        otp = self._request(client, sent_otps)
        resp = client.post('/auth/verify-otp', json={'email': 'bob@example.com', 'otp': otp})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body['team']['team_name'] == 'Segfaults'

        me = client.get('/auth/me')
        assert me.status_code == 200
        assert me.get_json()['team']['id'] == sample_data['team_id']

        with app.app_context():
            assert db.session.get(Team, sample_data['team_id']).otp_hash is None

    def test_otp_single_use(self, client, sample_data, sent_otps):
        otp = self._request(client, sent_otps)
        client.post('/auth/verify-otp', json={'email': 'alice@example.com', 'otp': otp})
        resp = client.post('/auth/verify-otp', json={'email': 'alice@example.com', 'otp': otp})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'No OTP request found'

    def test_wrong_otp(self, client, sample_data, sent_otps):
        otp = self._request(client, sent_otps)
        wrong = '000000' if otp != '000000' else '111111'
        resp = client.post('/auth/verify-otp', json={'email': 'alice@example.com', 'otp': wrong})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Invalid OTP'

    def test_repeated_wrong_guesses_revoke_otp(self, app, client, sample_data, sent_otps):
        otp = self._request(client, sent_otps)
        wrong = '000000' if otp != '000000' else '111111'
        limit = app.config['OTP_MAX_ATTEMPTS']
        for _ in range(limit - 1):
            resp = client.post('/auth/verify-otp', json={'email': 'alice@example.com', 'otp': wrong})
            assert resp.get_json()['error'] == 'Invalid OTP'

        resp = client.post('/auth/verify-otp', json={'email': 'alice@example.com', 'otp': wrong})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Too many invalid attempts. Request a new OTP.'

        resp = client.post('/auth/verify-otp', json={'email': 'alice@example.com', 'otp': otp})
        assert resp.get_json()['error'] == 'No OTP request found'

    def test_new_otp_resets_attempts(self, app, client, sample_data, sent_otps):
        otp = self._request(client, sent_otps)
        wrong = '000000' if otp != '000000' else '111111'
        client.post('/auth/verify-otp', json={'email': 'alice@example.com', 'otp': wrong})
        with app.app_context():
            assert db.session.get(Team, sample_data['team_id']).otp_attempts == 1

        otp = self._request(client, sent_otps)
        with app.app_context():
            assert db.session.get(Team, sample_data['team_id']).otp_attempts == 0
        resp = client.post('/auth/verify-otp', json={'email': 'alice@example.com', 'otp': otp})
        assert resp.status_code == 200

    def test_expired_otp(self, app, client, sample_data, sent_otps):
        otp = self._request(client, sent_otps)
        with app.app_context():
            team = db.session.get(Team, sample_data['team_id'])
            team.otp_expires_at = datetime.utcnow() - timedelta(seconds=1)
            db.session.commit()
        resp = client.post('/auth/verify-otp', json={'email': 'alice@example.com', 'otp': otp})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'OTP has expired'

    def test_missing_fields(self, client, sample_data):
        resp = client.post('/auth/verify-otp', json={'email': 'alice@example.com'})
        assert resp.status_code == 400


class TestPermissions:
    def test_protected_routes_require_login(self, client, sample_data):
        assert client.get('/auth/me').status_code == 401
        assert client.get('/question/').status_code == 401
        resp = client.post('/submission/submit', json={'code': 'x', 'questionid': 1})
        assert resp.status_code == 401
        assert resp.get_json()['kind'] == 'unauthorized'

    def test_logout(self, team_client):
        client, _ = team_client
        assert client.get('/auth/me').status_code == 200
        assert client.post('/auth/logout').status_code == 200
        assert client.get('/auth/me').status_code == 401
