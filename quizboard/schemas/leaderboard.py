"""Leaderboard schemas"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    rank: int
    id: int
    quiz_id: int
    student_id: int
    student_name: Optional[str] = None
    student_avatar: Optional[str] = None
    score: int
    total_questions: int
    percentage: float
    created_at: datetime


class LeaderboardEnvelope(BaseModel):
    success: bool = True
    quiz_id: int
    leaderboard: List[LeaderboardEntry]
