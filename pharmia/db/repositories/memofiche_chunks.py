from typing import Sequence
from sqlmodel import select, delete

from pharmia.db.repositories.base import BaseRepository
from pharmia.db.models.memofiche_chunks import MemoFicheChunk

class MemoFicheChunkRepository(BaseRepository[MemoFicheChunk]):
    model = MemoFicheChunk

    def list_for_fiche(self, fiche_id: int) -> Sequence[MemoFicheChunk]:
        return self.session.exec(
            select(self.model).where(self.model.source_fiche_id == fiche_id)
        ).all()

    def list_with_embeddings(self) -> Sequence[MemoFicheChunk]:
        return self.session.exec(select(self.model).order_by(self.model.id.asc())).all()

    def add_many(self, chunks: Sequence[MemoFicheChunk], *, commit: bool = True) -> int:
        self.session.add_all(list(chunks))
        if commit:
            self.session.commit()
        else:
            self.session.flush()
        return len(chunks)

    def delete_for_fiche(self, fiche_id: int, *, commit: bool = True) -> None:
        self.session.exec(delete(self.model).where(self.model.source_fiche_id == fiche_id))
        if commit:
            self.session.commit()

    def delete_all(self, *, commit: bool = True) -> None:
        self.session.exec(delete(self.model))
        if commit:
            self.session.commit()
