from pydantic import BaseModel


class StudyStats(BaseModel):
    due_today: int
    reviewed_today: int
    total_cards: int
    streak_days: int
