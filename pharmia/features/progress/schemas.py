from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuizHistoryEntry(BaseModel):
    quiz_id: str
    score: float
    completed_at: datetime
    fiche_id: Optional[str] = None


class ProgressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    read_fiche_ids: List[int] = []
    viewed_media_ids: List[str] = []
    quiz_history: List[QuizHistoryEntry] = []


class TrackReadFicheIn(BaseModel):
    fiche_id: int


class TrackMediaViewIn(BaseModel):
    media_id: str = Field(min_length=1)


class TrackQuizCompletionIn(BaseModel):
    quiz_id: str = Field(min_length=1)
    score: float = Field(ge=0)
    fiche_id: Optional[str] = None
