from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from pharmia.features.memofiches.schemas import (
    Flashcard,
    GlossaryEntry,
    MediaItem,
    MemoSection,
    QuizQuestion,
    Recommendations,
)

GenerationType = Literal["maladie", "pharmacologie", "exhaustive"]


class GenerateIn(BaseModel):
    memo_fiche_type: GenerationType = "maladie"
    source_text: str = Field(min_length=1)
    theme: Optional[str] = None
    system: Optional[str] = None
    pathology: Optional[str] = None


class MemoFicheDraft(BaseModel):
    """Brouillon renvoyé par l'IA : validé strictement, jamais enregistré tel quel."""

    title: str = Field(min_length=1)
    memo_fiche_type: GenerationType = "maladie"
    theme: Optional[str] = None
    system: Optional[str] = None
    short_description: Optional[str] = None
    patient_situation: Optional[str] = None
    pathology_overview: Optional[str] = None
    key_questions: List[str] = []
    red_flags: List[str] = []
    recommendations: Recommendations = Recommendations()
    key_points: List[str] = []
    references: List[str] = []
    flashcards: List[Flashcard] = []
    glossary: List[GlossaryEntry] = []
    media: List[MediaItem] = []
    quiz: List[QuizQuestion] = []
    memo_sections: List[MemoSection] = []
