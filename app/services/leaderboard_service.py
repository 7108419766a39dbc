from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from app.errors import NotFoundError, PersistenceError
from app.extensions import db, socketio
from app.models import Question, Submission, Team, TeamQuestionScore
from app.services.locks import team_locks

logger = logging.getLogger(__name__)

LEADERBOARD_EVENT = 'leaderboard_update'


def leaderboard_room(year: int) -> str:
    return f'leaderboard-{year}'


def reduce_question_scores(entries) -> dict[int, tuple[int, float]]:
    """Fold ``(question_number, passed, score)`` entries into per-question bests.

    Each question keeps the maximum passed count and the maximum score seen,
    so replaying any entry again never changes the result.
    """
    best: dict[int, tuple[int, float]] = {}
    for number, passed, score in entries:
        prev_passed, prev_score = best.get(number, (0, 0.0))
        best[number] = (max(prev_passed, passed), max(prev_score, score))
    return best


class LeaderboardService:
    @staticmethod
    def update_team_score(
        team_id: int, question_number: int, passed_count: int, new_score: float
    ) -> Team:
        """Record a question result for a team and recompute its total.

        The stored per-question values only ever grow, and the team score is
        always the sum of its per-question scores.
        """
        if question_number < 1:
            raise ValueError('question_number must be >= 1')

        with team_locks.hold(team_id):
            team = db.session.get(Team, team_id)
            if team is None:
                logger.warning(f'Team {team_id} not found while updating score')
                raise NotFoundError('Team not found.')

            try:
                row = TeamQuestionScore.query.filter_by(
                    team_id=team_id, question_number=question_number
                ).first()
                if row is None:
                    row = TeamQuestionScore(
                        team_id=team_id,
                        question_number=question_number,
                        testcases_passed=0,
                        score=0.0,
                    )
                    db.session.add(row)

                entries = [(question_number, row.testcases_passed, row.score),
                           (question_number, passed_count, new_score)]
                row.testcases_passed, row.score = reduce_question_scores(entries)[question_number]
                db.session.flush()

                team.score = LeaderboardService._sum_scores(team_id)
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error(
                    f'Failed to update score for team={team_id} number={question_number}: {e}'
                )
                raise PersistenceError(
                    'Failed to update team score.',
                    details={'team_id': team_id, 'question_number': question_number},
                ) from e

        logger.info(
            f'Updated team score: team={team_id} number={question_number} '
            f'passed={row.testcases_passed} question_score={row.score:.3f} '
            f'total={team.score:.3f}'
        )
        return team

    @staticmethod
    def rebuild_team_score(team_id: int) -> Team:
        """Replay a team's solved submissions into its score records.

        Used to repair the aggregate after a failed score write; solved
        submissions keep the score they were awarded.
        """
        team = db.session.get(Team, team_id)
        if team is None:
            raise NotFoundError('Team not found.')

        solved = (
            db.session.query(Question.number, Submission.testcases_passed, Submission.score)
            .join(Question, Submission.question_id == Question.id)
            .filter(Submission.team_id == team_id, Submission.all_passed.is_(True))
            .all()
        )
        for number, passed, score in solved:
            LeaderboardService.update_team_score(team_id, number, passed, score)

        db.session.refresh(team)
        logger.info(f'Rebuilt score for team {team_id} from {len(solved)} solved submission(s)')
        return team

    @staticmethod
    def _sum_scores(team_id: int) -> float:
        total = (
            db.session.query(func.coalesce(func.sum(TeamQuestionScore.score), 0.0))
            .filter(TeamQuestionScore.team_id == team_id)
            .scalar()
        )
        return float(total or 0.0)

    @staticmethod
    def get_standings(year: int) -> list[dict]:
        """Teams of *year* ordered by score, highest first."""
        teams = (
            Team.query.filter_by(year=year)
            .order_by(Team.score.desc(), Team.team_name.asc())
            .all()
        )
        return [t.to_standing() for t in teams]

    @staticmethod
    def notify_score_changed(year: int) -> None:
        """Push the current standings of *year* to its listeners."""
        standings = LeaderboardService.get_standings(year)
        socketio.emit(
            LEADERBOARD_EVENT,
            {'year': year, 'standings': standings},
            to=leaderboard_room(year),
        )
        logger.debug(f'Broadcast leaderboard for year {year} ({len(standings)} teams)')
