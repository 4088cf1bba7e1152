"""
➡️ But : Un moteur SQLAlchemy par processus et une session par requête.

engine : SQLite par défaut (fichier SQLITE_PATH), ou toute URL SQLAlchemy fournie via DATABASE_URL.

init_db() : crée les tables manquantes au démarrage.

get_session() : dépendance FastAPI, la session est fermée à la fin de la requête.
"""

from typing import Any, Dict

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from pharmia.core.config import settings

# Les tables doivent être enregistrées dans SQLModel.metadata avant create_all()
from pharmia.db.models.users import User  # noqa: F401
from pharmia.db.models.memofiches import MemoFiche  # noqa: F401
from pharmia.db.models.memofiche_chunks import MemoFicheChunk  # noqa: F401
from pharmia.db.models.subscribers import Subscriber  # noqa: F401
from pharmia.db.models.payments import Payment  # noqa: F401


def _build_engine(url: str) -> Engine:
    sqlite = url.startswith("sqlite:")
    connect_args: Dict[str, Any] = {}
    if sqlite:
        # les endpoints synchrones tournent dans un pool de threads
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, pool_pre_ping=not sqlite)

engine: Engine = _build_engine(settings.DATABASE_URL)

def init_db(bind: Engine | None = None) -> None:
    """Pas de framework de migration : les évolutions de schéma passent par des scripts ponctuels."""
    SQLModel.metadata.create_all(bind or engine)

def get_session():
    with Session(engine) as session:
        yield session
