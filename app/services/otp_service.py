from __future__ import annotations

import logging
import secrets
import smtplib
import string
from datetime import datetime, timedelta
from email.mime.text import MIMEText
from email.utils import formatdate

from flask import current_app

from app.errors import ContestError, NotFoundError, ValidationError
from app.extensions import db
from app.models import Team

logger = logging.getLogger(__name__)


def generate_otp(length: int = 6) -> str:
    """Cryptographically random numeric one-time password."""
    return ''.join(secrets.choice(string.digits) for _ in range(length))


class OtpService:
    @staticmethod
    def request_login(email: str) -> Team:
        """Issue a fresh OTP for the team owning *email* and mail it to every member."""
        if not email:
            raise ValidationError('Email is required')
        team = Team.find_by_email(email)
        if team is None:
            raise NotFoundError(
                'No team found with this email. Please contact administrator for access.'
            )

        otp = generate_otp()
        now = datetime.utcnow()
        expiry = current_app.config.get('OTP_EXPIRY_MINUTES', 5)
        team.set_otp(otp, now, now + timedelta(minutes=expiry))
        db.session.commit()

        for member_email in team.emails:
            try:
                OtpService.deliver(member_email, otp, expiry)
            except (smtplib.SMTPException, OSError) as e:
                logger.error(f'Error sending OTP mail to {member_email}: {e}')
                raise ContestError('Failed to send OTP email') from e
        logger.info(f'OTP issued for team {team.id} ({len(team.emails)} recipient(s))')
        return team

    @staticmethod
    def verify(email: str, otp: str) -> Team:
        if not email or not otp:
            raise ValidationError('Email and OTP are required')
        team = Team.find_by_email(email)
        if team is None:
            raise NotFoundError('Team not found')
        if not team.otp_hash or not team.otp_expires_at:
            raise ValidationError('No OTP request found')
        if datetime.utcnow() > team.otp_expires_at:
            raise ValidationError('OTP has expired')
        if not team.check_otp(str(otp).strip()):
            OtpService._record_failed_attempt(team)
            raise ValidationError('Invalid OTP')

        team.clear_otp()
        db.session.commit()
        return team

    @staticmethod
    def _record_failed_attempt(team: Team) -> None:
        """Count a wrong guess; the OTP is revoked once the limit is reached."""
        Team.query.filter_by(id=team.id).update(
            {Team.otp_attempts: Team.otp_attempts + 1}, synchronize_session=False,
        )
        db.session.commit()
        limit = current_app.config.get('OTP_MAX_ATTEMPTS', 5)
        if team.otp_attempts >= limit:
            team.clear_otp()
            db.session.commit()
            logger.warning(f'OTP revoked for team={team.id} after {limit} invalid attempts')
            raise ValidationError('Too many invalid attempts. Request a new OTP.')
        logger.warning(f'Invalid OTP attempt {team.otp_attempts}/{limit} for team={team.id}')

    @staticmethod
    def deliver(to_email: str, otp: str, expiry_minutes: int) -> None:
        """Send the OTP through the configured SMTP server."""
        config = current_app.config
        server_host = config.get('MAIL_SERVER')
        if not server_host:
            logger.warning(f'MAIL_SERVER not configured; OTP mail to {to_email} not sent')
            return

        msg = MIMEText(
            f'Your OTP for login is: {otp}. '
            f'This OTP will expire in {expiry_minutes} minutes.'
        )
        msg['From'] = config.get('MAIL_DEFAULT_SENDER') or config.get('MAIL_USERNAME')
        msg['To'] = to_email
        msg['Subject'] = 'Login OTP'
        msg['Date'] = formatdate(localtime=True)

        with smtplib.SMTP(server_host, config.get('MAIL_PORT', 587), timeout=30) as server:
            if config.get('MAIL_USE_TLS', True):
                server.starttls()
            if config.get('MAIL_USERNAME'):
                server.login(config['MAIL_USERNAME'], config.get('MAIL_PASSWORD', ''))
            server.send_message(msg)
