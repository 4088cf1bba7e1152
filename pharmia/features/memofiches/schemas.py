"""
➡️ But : Définir les formats d'entrée/sortie des mémofiches.

Les sous-structures (recommandations, quiz, flashcards…) sont des modèles Pydantic validés,
puis stockées telles quelles (model_dump JSON) dans les colonnes JSON de la table.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MemoFicheType = Literal["maladie", "pharmacologie", "exhaustive", "manuel"]


# ---------- Sous-structures ----------

class Recommendations(BaseModel):
    main_treatment: List[str] = []
    associated_products: List[str] = []
    lifestyle_advice: List[str] = []
    dietary_advice: List[str] = []


class Flashcard(BaseModel):
    question: str
    answer: str


class GlossaryEntry(BaseModel):
    term: str
    definition: str


class MediaItem(BaseModel):
    type: str = "video"
    title: str
    url: Optional[str] = None
    description: Optional[str] = None


class QuizQuestion(BaseModel):
    question: str
    options: List[str] = Field(min_length=2)
    correct_answer_index: int = Field(ge=0)
    explanation: Optional[str] = None
    type: Literal["single-choice", "true-false"] = "single-choice"

    @model_validator(mode="after")
    def _check_answer(self):
        if self.correct_answer_index >= len(self.options):
            raise ValueError("correct_answer_index hors des options")
        # Vrai/Faux : index 0 = "Vrai", 1 = "Faux"
        if self.type == "true-false" and len(self.options) != 2:
            raise ValueError("une question Vrai/Faux a exactement deux options")
        return self


class MemoSection(BaseModel):
    title: str
    content: str


# ---------- Contenu commun ----------

class MemoFicheContent(BaseModel):
    theme: Optional[str] = None
    system: Optional[str] = None
    short_description: Optional[str] = None
    level: Optional[str] = None
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


# ---------- Inputs ----------

class MemoFicheCreate(MemoFicheContent):
    title: str = Field(min_length=1, max_length=255)
    memo_fiche_type: MemoFicheType = "maladie"
    is_free: bool = False
    cover_image_url: Optional[str] = None
    youtube_url: Optional[str] = None
    kahoot_url: Optional[str] = None
    knowledge_base_url: Optional[str] = None
    source_text: Optional[str] = None


class MemoFicheUpdate(BaseModel):
    """Mise à jour partielle : seuls les champs envoyés sont modifiés."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    theme: Optional[str] = None
    system: Optional[str] = None
    memo_fiche_type: Optional[MemoFicheType] = None
    short_description: Optional[str] = None
    level: Optional[str] = None
    is_free: Optional[bool] = None
    patient_situation: Optional[str] = None
    pathology_overview: Optional[str] = None
    key_questions: Optional[List[str]] = None
    red_flags: Optional[List[str]] = None
    recommendations: Optional[Recommendations] = None
    key_points: Optional[List[str]] = None
    references: Optional[List[str]] = None
    flashcards: Optional[List[Flashcard]] = None
    glossary: Optional[List[GlossaryEntry]] = None
    media: Optional[List[MediaItem]] = None
    quiz: Optional[List[QuizQuestion]] = None
    memo_sections: Optional[List[MemoSection]] = None
    cover_image_url: Optional[str] = None
    youtube_url: Optional[str] = None
    kahoot_url: Optional[str] = None
    knowledge_base_url: Optional[str] = None
    source_text: Optional[str] = None

    @field_validator(
        "title", "memo_fiche_type", "is_free", "key_questions", "red_flags", "recommendations",
        "key_points", "references", "flashcards", "glossary", "media", "quiz", "memo_sections",
    )
    @classmethod
    def reject_null(cls, value):
        # champs non nullables en base : null ne vaut pas effacement
        if value is None:
            raise ValueError("Ce champ ne peut pas être null.")
        return value


class FicheDetailsIn(BaseModel):
    ids: List[int]


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1)


class AssistantIn(BaseModel):
    messages: List[ChatMessage] = Field(min_length=1, description="Conversation, la dernière entrée est la question")


# ---------- Outputs ----------

class MemoFicheOut(MemoFicheCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class MemoFicheSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    theme: Optional[str] = None
    system: Optional[str] = None
    memo_fiche_type: str
    short_description: Optional[str] = None
    level: Optional[str] = None
    is_free: bool = False
    cover_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    is_locked: bool = False


class FicheDetailsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    theme: Optional[str] = None


class CountOut(BaseModel):
    count: int


class AssistantOut(BaseModel):
    response: str
