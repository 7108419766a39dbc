from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import requests
from flask import current_app

from app.errors import CompilerServiceError, CompilerTimeoutError

# Interpreter error class names that mark an attempt as a syntax error.
SYNTAX_ERROR_MARKERS = ('SyntaxError', 'NameError', 'TypeError', 'IndentationError')


@dataclass
class TestResult:
    passed: bool
    actual_output: str = ''

    __test__ = False  # not a pytest test class

    def to_dict(self) -> dict:
        return {'passed': self.passed, 'actualOutput': self.actual_output}


def has_syntax_error(results: list[TestResult]) -> bool:
    """True if any test output carries an interpreter error marker."""
    return any(
        marker in (r.actual_output or '')
        for r in results
        for marker in SYNTAX_ERROR_MARKERS
    )


def count_passed(results: list[TestResult]) -> int:
    return sum(1 for r in results if r.passed)


class CompilerClient:
    """HTTP client for the external code-execution service."""

    SUBMIT_PATH = '/submit-python'

    def __init__(self, base_url: str, timeout: float = 30.0, max_retries: int = 2):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.logger = logging.getLogger(__name__)
        self.session = self._create_session()

    @classmethod
    def from_config(cls, config=None) -> CompilerClient:
        config = config or current_app.config
        return cls(
            config['COMPILER_URL'],
            timeout=config.get('COMPILER_TIMEOUT', 30.0),
            max_retries=config.get('COMPILER_MAX_RETRIES', 2),
        )

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({'Content-Type': 'application/json'})
        return session

    def run(self, code: str, test_cases: list[dict], submission_ref) -> list[TestResult]:
        """Execute *code* against *test_cases*; one result per test case.

        Raises:
            CompilerTimeoutError: the service did not answer within the timeout.
            CompilerServiceError: the service was unreachable, failed, or
                answered without a usable ``results`` list.
        """
        payload = {
            'code': code,
            'testCases': test_cases,
            'submissionid': submission_ref,
        }
        resp = self._post_with_retry(self.base_url + self.SUBMIT_PATH, payload)

        try:
            data = resp.json()
        except ValueError:
            raise CompilerServiceError('Compiler service returned a non-JSON response')

        raw_results = data.get('results') if isinstance(data, dict) else None
        if not isinstance(raw_results, list):
            raise CompilerServiceError(
                'Compiler service error', details={'response': data}
            )
        if len(raw_results) != len(test_cases):
            raise CompilerServiceError(
                f'Compiler service returned {len(raw_results)} results '
                f'for {len(test_cases)} test cases'
            )

        results = []
        for item in raw_results:
            if not isinstance(item, dict):
                raise CompilerServiceError('Malformed test result from compiler service')
            results.append(TestResult(
                passed=bool(item.get('passed')),
                actual_output=str(item.get('actualOutput') or ''),
            ))
        return results

    def _post_with_retry(self, url, payload):
        # Only connection failures are retried; a timeout is final so the
        # grading path stays bounded by roughly one timeout.
        for attempt in range(self.max_retries):
            try:
                resp = self.session.post(url, json=payload, timeout=self.timeout)
                resp.raise_for_status()
                return resp
            except requests.Timeout as e:
                self.logger.warning(f"Compiler request timed out after {self.timeout}s: {e}")
                raise CompilerTimeoutError(
                    f'Compiler service did not respond within {self.timeout} seconds'
                ) from e
            except requests.ConnectionError as e:
                self.logger.warning(
                    f"Compiler request failed (attempt {attempt + 1}/{self.max_retries}): {e}"
                )
                if attempt < self.max_retries - 1:
                    time.sleep(0.5 * 2 ** attempt)
                else:
                    raise CompilerServiceError('Compiler service unreachable') from e
            except requests.RequestException as e:
                self.logger.error(f"Compiler request failed: {e}")
                raise CompilerServiceError(f'Compiler service error: {e}') from e
