from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.errors import ForbiddenError, NotFoundError, PersistenceError, ValidationError
from app.extensions import db
from app.models import Question, Submission, SubmissionLog, SubmissionStatus, Team
from app.services.compiler_client import (
    CompilerClient, TestResult, count_passed, has_syntax_error,
)
from app.services.leaderboard_service import LeaderboardService
from app.services.locks import submission_locks
from app.services.scoring import compute_score

logger = logging.getLogger(__name__)


def classify_attempt(results: list[TestResult], total_testcases: int) -> SubmissionStatus:
    """Syntax errors win over everything; otherwise all-or-nothing acceptance."""
    if has_syntax_error(results):
        return SubmissionStatus.SYNTAX_ERROR
    if count_passed(results) == total_testcases:
        return SubmissionStatus.ACCEPTED
    return SubmissionStatus.WRONG_SUBMISSION


@dataclass
class GradingOutcome:
    submission_id: int
    passed_count: int
    total_testcases: int
    status: SubmissionStatus
    new_score: float = 0.0
    already_solved: bool = False
    newly_solved: bool = False
    results: list[TestResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'submissionId': self.submission_id,
            'passedCount': self.passed_count,
            'totalTestcases': self.total_testcases,
            'newScore': self.new_score,
            'status': self.status.value,
            'alreadySolved': self.already_solved,
            'results': [r.to_dict() for r in self.results],
        }


class GradingService:
    """Grades code submissions and advances the per-question submission state.

    A (team, question) pair moves NEW -> ATTEMPTING -> SOLVED. Every graded
    attempt is logged, but penalties and the score only move until the pair
    is solved; the score is awarded exactly once, on the solving attempt.
    """

    def __init__(self, compiler: CompilerClient | None = None, notifier=None):
        self.compiler = compiler or CompilerClient.from_config()
        self.notifier = notifier or LeaderboardService.notify_score_changed

    def submit(self, team_id: int, question_id: int, code: str) -> GradingOutcome:
        if not isinstance(code, str) or not code.strip():
            raise ValidationError('Missing required fields.')

        team = db.session.get(Team, team_id)
        if team is None:
            raise NotFoundError('Team not found.')
        question = db.session.get(Question, question_id)
        if question is None:
            raise NotFoundError('Question not found.')
        if question.year != team.year:
            raise ForbiddenError('Access denied. Question is not for your year.')
        test_cases = question.test_cases
        if not test_cases:
            raise ValidationError('No test cases found for this question.')

        started_at = datetime.utcnow()
        # Long-latency call: made before any lock is taken or row is written,
        # so a compiler failure leaves all state untouched.
        results = self.compiler.run(code, test_cases, f'{team_id}:{question_id}')
        graded_at = datetime.utcnow()

        passed_count = count_passed(results)
        status = classify_attempt(results, len(test_cases))

        outcome = self._record_attempt(
            team, question, code, results, passed_count, status, started_at, graded_at,
        )
        logger.info(
            f'Graded team={team_id} question={question_id}: {status.value} '
            f'{passed_count}/{len(test_cases)} new_score={outcome.new_score:.3f}'
            + (' (already solved)' if outcome.already_solved else '')
        )

        if outcome.newly_solved:
            LeaderboardService.update_team_score(
                team.id, question.number, passed_count, outcome.new_score,
            )
            try:
                self.notifier(team.year)
            except Exception as e:
                logger.error(f'Leaderboard broadcast failed for year {team.year}: {e}')

        return outcome

    def _record_attempt(
        self, team, question, code, results, passed_count, status, started_at, graded_at,
    ) -> GradingOutcome:
        total = len(question.test_cases)
        with submission_locks.hold((team.id, question.id)):
            try:
                submission = self._get_or_create_submission(
                    team.id, question.id, code, started_at,
                )
                db.session.add(SubmissionLog(
                    submission_id=submission.id,
                    status=status.value,
                    created_at=graded_at,
                ))

                outcome = GradingOutcome(
                    submission_id=submission.id,
                    passed_count=passed_count,
                    total_testcases=total,
                    status=status,
                    results=results,
                )

                if submission.all_passed:
                    submission.code = code
                    submission.testcases_passed = passed_count
                    db.session.commit()
                    outcome.already_solved = True
                    return outcome

                accepted = status is SubmissionStatus.ACCEPTED
                values = {
                    Submission.code: code,
                    Submission.testcases_passed: passed_count,
                    Submission.syntax_error: Submission.syntax_error + (
                        1 if status is SubmissionStatus.SYNTAX_ERROR else 0
                    ),
                    # Syntax errors are counted separately, never as wrong submissions.
                    Submission.wrong_submission: Submission.wrong_submission + (
                        1 if status is SubmissionStatus.WRONG_SUBMISSION else 0
                    ),
                }
                if accepted:
                    elapsed = max(0.0, (graded_at - submission.created_at).total_seconds())
                    new_score = compute_score(
                        passed_count, total, elapsed,
                        submission.syntax_error, submission.wrong_submission,
                    )
                    values.update({
                        Submission.all_passed: True,
                        Submission.score: new_score,
                        Submission.solved_at: graded_at,
                    })
                    outcome.new_score = new_score

                # Conditional on the row still being unsolved, so a pair is
                # solved at most once even across worker processes.
                updated = Submission.query.filter(
                    Submission.id == submission.id,
                    Submission.all_passed.is_(False),
                ).update(values, synchronize_session=False)

                if not updated:
                    Submission.query.filter_by(id=submission.id).update(
                        {Submission.code: code, Submission.testcases_passed: passed_count},
                        synchronize_session=False,
                    )
                    outcome.already_solved = True
                    outcome.new_score = 0.0
                else:
                    outcome.newly_solved = accepted

                db.session.commit()
                return outcome
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error(
                    f'Failed to record attempt for team={team.id} question={question.id}: {e}'
                )
                raise PersistenceError(
                    'Failed to record submission.',
                    details={'team_id': team.id, 'question_id': question.id},
                ) from e

    @staticmethod
    def _get_or_create_submission(team_id, question_id, code, started_at) -> Submission:
        submission = Submission.query.filter_by(
            team_id=team_id, question_id=question_id
        ).first()
        if submission:
            return submission

        submission = Submission(
            team_id=team_id,
            question_id=question_id,
            code=code,
            testcases_passed=0,
            all_passed=False,
            syntax_error=0,
            wrong_submission=0,
            created_at=started_at,
        )
        db.session.add(submission)
        try:
            db.session.flush()
        except IntegrityError:
            # Another worker created the row first.
            db.session.rollback()
            submission = Submission.query.filter_by(
                team_id=team_id, question_id=question_id
            ).one()
        return submission

    def check_reference_solution(self, question_id: int) -> dict:
        """Run a question's reference solution against its own test cases."""
        question = db.session.get(Question, question_id)
        if question is None:
            raise NotFoundError('Question not found.')
        test_cases = question.test_cases
        if not test_cases:
            raise ValidationError('No test cases found for this question.')

        results = self.compiler.run(question.correct_code, test_cases, f'question:{question.id}')
        return {
            'passed': count_passed(results),
            'total': len(results),
            'results': [r.to_dict() for r in results],
        }

    @staticmethod
    def get_submission(team_id: int, question_id: int) -> Submission | None:
        return Submission.query.filter_by(team_id=team_id, question_id=question_id).first()

    @staticmethod
    def get_logs(team_id: int, question_id: int) -> list[SubmissionLog]:
        """Grading history of a team on a question, most recent first."""
        submission = GradingService.get_submission(team_id, question_id)
        if submission is None:
            return []
        return (
            SubmissionLog.query.filter_by(submission_id=submission.id)
            .order_by(SubmissionLog.created_at.desc(), SubmissionLog.id.desc())
            .all()
        )
