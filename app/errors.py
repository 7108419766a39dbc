"""Domain errors raised by the service layer.

Views never build error responses for these by hand: the handler registered
in :func:`register_error_handlers` turns each one into a JSON body of the
form ``{"error": <message>, "kind": <kind>}`` with the class's status code.
"""
from __future__ import annotations

import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class ContestError(Exception):
    """Base class for errors reported back to the caller."""

    status_code = 500
    kind = 'error'

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {'error': self.message, 'kind': self.kind}
        if self.details:
            body['details'] = self.details
        return body


class ValidationError(ContestError):
    """Missing or malformed input; nothing was written."""

    status_code = 400
    kind = 'validation'


class NotFoundError(ContestError):
    status_code = 404
    kind = 'not_found'


class ForbiddenError(ContestError):
    status_code = 403
    kind = 'forbidden'


class CompilerServiceError(ContestError):
    """The code-execution service was unreachable or answered garbage."""

    status_code = 502
    kind = 'compiler'


class CompilerTimeoutError(CompilerServiceError):
    status_code = 504
    kind = 'compiler_timeout'


class PersistenceError(ContestError):
    """A database write failed part way through a grading request."""

    status_code = 500
    kind = 'persistence'


def register_error_handlers(app):
    """Serialize :class:`ContestError` subclasses as JSON responses."""

    @app.errorhandler(ContestError)
    def handle_contest_error(error):
        if error.status_code >= 500:
            logger.error(f'{error.kind} error: {error.message}')
        else:
            logger.info(f'{error.kind} error: {error.message}')
        return jsonify(error.to_dict()), error.status_code
