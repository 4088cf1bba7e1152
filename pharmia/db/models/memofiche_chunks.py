from typing import List

from sqlalchemy import Column, ForeignKey, Integer, JSON, Text
from sqlmodel import Field

from .base import BaseModelDB


class MemoFicheChunk(BaseModelDB, table=True):
    """Fragment textuel d'une mémofiche et son embedding, pour la recherche sémantique du chat."""

    __tablename__ = "memofiche_chunks"

    source_fiche_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("memofiches_v2.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    source_fiche_title: str
    section: str = Field(description="Chemin de la section, ex: recommendations.main_treatment[0]")
    content: str = Field(sa_column=Column(Text, nullable=False))
    embedding: List[float] = Field(default_factory=list, sa_column=Column(JSON))
