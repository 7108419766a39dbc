from .team import Team
from .question import Question
from .submission import Submission
from .submission_log import SubmissionLog, SubmissionStatus
from .team_question_score import TeamQuestionScore

__all__ = [
    'Team',
    'Question',
    'Submission',
    'SubmissionLog',
    'SubmissionStatus',
    'TeamQuestionScore',
]
