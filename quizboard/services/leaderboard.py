"""Leaderboard reader"""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from quizboard.core.exceptions import NotFoundError
from quizboard.models.quiz import Quiz, ScoreRecord
from quizboard.models.user import User

logger = logging.getLogger(__name__)


class LeaderboardService:
    """Ranks score records for a quiz"""

    @staticmethod
    def get_quiz_leaderboard(db: Session, quiz_id: int) -> List[Dict[str, Any]]:
        """
        Score records for a quiz joined with the student's profile

        Ordered by score descending, then earliest submission, then id, so
        equal scores always come back in the same order.
        """
        if not db.query(Quiz.id).filter(Quiz.id == quiz_id).first():
            raise NotFoundError("Quiz")

        rows = (
            db.query(ScoreRecord, User)
            .outerjoin(User, User.id == ScoreRecord.student_id)
            .filter(ScoreRecord.quiz_id == quiz_id)
            .order_by(ScoreRecord.score.desc(), ScoreRecord.created_at.asc(), ScoreRecord.id.asc())
            .all()
        )

        leaderboard = []
        for rank, (record, student) in enumerate(rows, start=1):
            leaderboard.append(
                {
                    "rank": rank,
                    "id": record.id,
                    "quiz_id": record.quiz_id,
                    "student_id": record.student_id,
                    "student_name": student.full_name if student else None,
                    "student_email": student.email if student else None,
                    "student_avatar": student.avatar_url if student else None,
                    "score": record.score,
                    "total_questions": record.total_questions,
                    "percentage": record.percentage,
                    "created_at": record.created_at,
                }
            )

        logger.debug(f"Leaderboard for quiz {quiz_id}: {len(leaderboard)} entries")
        return leaderboard


leaderboard_service = LeaderboardService()
