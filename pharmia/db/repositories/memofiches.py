from typing import Optional, Sequence
from sqlmodel import select

from pharmia.db.repositories.base import BaseRepository
from pharmia.db.models.memofiches import MemoFiche

class MemoFicheRepository(BaseRepository[MemoFiche]):
    """CRUD mémofiches + recherche simple."""
    model = MemoFiche

    def search(
        self,
        *,
        theme: Optional[str] = None,
        system: Optional[str] = None,
        q: Optional[str] = None,
    ) -> Sequence[MemoFiche]:
        """
        Liste des mémofiches, les plus récentes d'abord.
        - theme / system : égalité stricte
        - q              : recherche insensible à la casse sur le titre
        """
        stmt = select(self.model)
        if theme:
            stmt = stmt.where(self.model.theme == theme)
        if system:
            stmt = stmt.where(self.model.system == system)
        if q:
            stmt = stmt.where(self.model.title.ilike(f"%{q}%"))
        stmt = stmt.order_by(self.model.id.desc())
        return self.session.exec(stmt).all()

    def existing_ids(self, ids: Sequence[int]) -> set[int]:
        if not ids:
            return set()
        rows = self.session.exec(select(self.model.id).where(self.model.id.in_(ids))).all()
        return set(rows)
