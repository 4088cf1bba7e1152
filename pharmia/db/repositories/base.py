from typing import Any, Generic, Optional, Sequence, Type, TypeVar
from sqlmodel import SQLModel, Session, select, func

from pharmia.db.models.base import utcnow

# Type générique pour le modèle (User, MemoFiche, etc.)
ModelT = TypeVar("ModelT", bound=SQLModel)

class BaseRepository(Generic[ModelT]):
    """
    Persistance générique partagée par les repositories PharmIA.

    👉 Aucune règle métier ici : les services décident, les repositories lisent et écrivent.
    👉 Chaque repository concret déclare `model = MaTableSQLModel`.
    👉 `commit=False` laisse le service regrouper plusieurs écritures dans une seule transaction.
    """

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    def _save(self, entity: ModelT, commit: bool) -> ModelT:
        self.session.add(entity)
        if commit:
            self.session.commit()
            self.session.refresh(entity)
        else:
            # l'identifiant est attribué dès le flush
            self.session.flush()
        return entity

    # ---------- Lecture ----------

    def get(self, id_: Any) -> Optional[ModelT]:
        return self.session.get(self.model, id_)

    def get_many(self, ids: Sequence[int]) -> Sequence[ModelT]:
        """Enregistrements dont l'identifiant figure dans `ids` ; les identifiants inconnus sont ignorés."""
        if not ids:
            return []
        return self.session.exec(select(self.model).where(self.model.id.in_(ids))).all()

    def list_all(self) -> Sequence[ModelT]:
        """Tous les enregistrements, les plus récents d'abord."""
        return self.session.exec(select(self.model).order_by(self.model.id.desc())).all()

    def count(self) -> int:
        return self.session.exec(select(func.count(self.model.id))).one()

    # ---------- Écriture ----------

    def create(self, *, commit: bool = True, **fields) -> ModelT:
        return self._save(self.model(**fields), commit)

    def update(self, entity: ModelT, *, commit: bool = True, **changes) -> ModelT:
        """
        Applique `changes` (dernière écriture gagnante) et rafraîchit `updated_at`.
        Les colonnes JSON doivent recevoir une nouvelle liste ou un nouveau dict, jamais une mutation en place.
        """
        for key, value in changes.items():
            setattr(entity, key, value)
        if hasattr(entity, "updated_at"):
            entity.updated_at = utcnow()
        return self._save(entity, commit)

    def delete(self, entity: ModelT, *, commit: bool = True) -> None:
        self.session.delete(entity)
        if commit:
            self.session.commit()
        else:
            self.session.flush()

    # ---------- Transaction ----------

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        """Annule les écritures faites avec `commit=False` depuis le dernier commit."""
        self.session.rollback()
