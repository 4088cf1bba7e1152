from typing import Any, Dict, List, Optional

from sqlalchemy import Column, JSON, Text
from sqlmodel import Field

from .base import BaseModelDB


class MemoFiche(BaseModelDB, table=True):
    """
    Mémofiche de formation : scénario patient, recommandations, quiz, flashcards…
    Les sections structurées sont des colonnes JSON, le document est réécrit en entier à chaque mise à jour.
    """

    __tablename__ = "memofiches_v2"

    # Métadonnées
    title: str = Field(index=True)
    theme: Optional[str] = Field(default=None, index=True)
    system: Optional[str] = Field(default=None, index=True)
    memo_fiche_type: str = Field(default="maladie")
    short_description: Optional[str] = None
    level: Optional[str] = None
    is_free: bool = Field(default=False)

    # Contenu
    patient_situation: Optional[str] = Field(default=None, sa_column=Column(Text))
    pathology_overview: Optional[str] = Field(default=None, sa_column=Column(Text))
    key_questions: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    red_flags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    recommendations: Dict[str, List[str]] = Field(default_factory=dict, sa_column=Column(JSON))
    key_points: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    references: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    flashcards: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    glossary: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    media: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    quiz: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    memo_sections: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    # Liens
    cover_image_url: Optional[str] = None
    youtube_url: Optional[str] = None
    kahoot_url: Optional[str] = None
    knowledge_base_url: Optional[str] = None

    # Texte source utilisé pour la génération
    source_text: Optional[str] = Field(default=None, sa_column=Column(Text))
