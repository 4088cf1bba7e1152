"""
➡️ But : Définir la structure des tables de la base (ORM).

Contient les classes héritant de SQLModel.

Représente les objets persistés. Ici on représente les propriétés communes de toutes les tables.

Les parties imbriquées des documents (recommandations, quiz, historiques…) sont stockées
dans des colonnes JSON : un enregistrement reste un document complet, lu et écrit d'un bloc.

Les dates sont en UTC naïf, dans des colonnes `DateTime` sans fuseau (`sa_type=DateTime`).
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    """Heure UTC courante, naïve (SQLite ne conserve pas le fuseau)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModelDB(SQLModel, table=False):
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
