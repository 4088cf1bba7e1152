"""
➡️ But : Maintenir la base de connaissances du chat (fragments + embeddings) et y chercher.

- index_fiche()  : remplace les fragments d'une fiche (un appel d'embedding groupé)
- rebuild_all()  : ré-indexe toutes les fiches puis remplace la table en une transaction
- search()       : similarité cosinus (numpy) entre la question et les fragments stockés
"""

import logging
from typing import List, Tuple

import numpy as np

from pharmia.db.models.memofiche_chunks import MemoFicheChunk
from pharmia.db.models.memofiches import MemoFiche
from pharmia.db.repositories.memofiche_chunks import MemoFicheChunkRepository
from pharmia.db.repositories.memofiches import MemoFicheRepository
from pharmia.features.knowledge_base.chunking import chunk_fiche
from pharmia.features.knowledge_base.schemas import KnowledgeBaseUpdateOut
from pharmia.utils.gemini import GeminiClient

logger = logging.getLogger(__name__)


class KnowledgeBaseService:
    def __init__(
        self,
        *,
        fiche_repo: MemoFicheRepository,
        chunk_repo: MemoFicheChunkRepository,
        ai: GeminiClient,
    ):
        self.fiche_repo = fiche_repo
        self.chunk_repo = chunk_repo
        self.ai = ai

    def _build_chunks(self, fiche: MemoFiche) -> List[MemoFicheChunk]:
        drafts = chunk_fiche(fiche.model_dump())
        if not drafts:
            logger.info("Aucun fragment pour la fiche %s (%s)", fiche.id, fiche.title)
            return []
        embeddings = self.ai.embed([d.content for d in drafts])
        return [
            MemoFicheChunk(
                source_fiche_id=fiche.id,
                source_fiche_title=fiche.title,
                section=draft.section,
                content=draft.content,
                embedding=vector,
            )
            for draft, vector in zip(drafts, embeddings)
        ]

    def index_fiche(self, fiche: MemoFiche) -> int:
        # embeddings calculés avant toute suppression : un échec laisse l'index précédent intact
        chunks = self._build_chunks(fiche)
        self.chunk_repo.delete_for_fiche(fiche.id, commit=False)
        count = self.chunk_repo.add_many(chunks)
        logger.info("Fiche %s indexée : %d fragments", fiche.id, count)
        return count

    def rebuild_all(self) -> KnowledgeBaseUpdateOut:
        logger.info("Reconstruction de la base de connaissances…")
        fiches = self.fiche_repo.list_all()
        # tous les embeddings avant la première écriture : un échec laisse l'index précédent intact
        chunks: List[MemoFicheChunk] = []
        for fiche in fiches:
            chunks.extend(self._build_chunks(fiche))
        self.chunk_repo.delete_all(commit=False)
        total = self.chunk_repo.add_many(chunks)
        logger.info("Base de connaissances : %d fiches traitées, %d fragments", len(fiches), total)
        return KnowledgeBaseUpdateOut(processed=len(fiches), chunks=total)

    def search(self, query: str, *, top_k: int = 5) -> List[Tuple[MemoFicheChunk, float]]:
        chunks = [c for c in self.chunk_repo.list_with_embeddings() if c.embedding]
        if not chunks:
            return []
        query_vector = np.asarray(self.ai.embed_query(query), dtype="float32")
        matrix = np.asarray([c.embedding for c in chunks], dtype="float32")

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vector) + 1e-12
        scores = (matrix @ query_vector) / norms
        order = np.argsort(scores)[::-1][:top_k]
        return [(chunks[i], float(scores[i])) for i in order]
