"""
➡️ But : Logique métier des mémofiches : consultation selon la politique d'accès, CRUD éditorial,
ré-indexation dans la base de connaissances après chaque écriture.
"""

import logging
from typing import List, Optional, Sequence

from pharmia.core.exceptions import ForbiddenError, InvalidRequestError, NotFoundError, PharmiaError
from pharmia.db.models.memofiches import MemoFiche
from pharmia.db.models.users import User
from pharmia.db.repositories.memofiche_chunks import MemoFicheChunkRepository
from pharmia.db.repositories.memofiches import MemoFicheRepository
from pharmia.features.knowledge_base.services import KnowledgeBaseService
from pharmia.features.memofiches.schemas import MemoFicheCreate, MemoFicheSummaryOut, MemoFicheUpdate
from pharmia.features.subscriptions.policy import AccessPolicy

logger = logging.getLogger(__name__)

LOCKED_DETAIL = "Contenu réservé aux abonnés. Abonnez-vous pour accéder à cette mémofiche."


class MemoFicheService:
    def __init__(
        self,
        *,
        repo: MemoFicheRepository,
        chunk_repo: MemoFicheChunkRepository,
        knowledge_base: KnowledgeBaseService,
        policy: AccessPolicy,
        auto_index: bool = True,
    ):
        self.repo = repo
        self.chunk_repo = chunk_repo
        self.knowledge_base = knowledge_base
        self.policy = policy
        self.auto_index = auto_index

    # ---------- Lecture ----------
    def list_for(
        self,
        user: User,
        *,
        theme: Optional[str] = None,
        system: Optional[str] = None,
        q: Optional[str] = None,
    ) -> List[MemoFicheSummaryOut]:
        fiches = self.repo.search(theme=theme, system=system, q=q)
        items = []
        for fiche in fiches:
            item = MemoFicheSummaryOut.model_validate(fiche)
            item.is_locked = not self.policy.can_access_fiche(user, fiche)
            items.append(item)
        return items

    def count(self) -> int:
        return self.repo.count()

    def get(self, fiche_id: int) -> MemoFiche:
        fiche = self.repo.get(fiche_id)
        if not fiche:
            raise NotFoundError("Mémofiche non trouvée.")
        return fiche

    def get_for(self, user: User, fiche_id: int) -> MemoFiche:
        fiche = self.get(fiche_id)
        if not self.policy.can_access_fiche(user, fiche):
            raise ForbiddenError(LOCKED_DETAIL)
        return fiche

    def details_for(self, user: User, ids: Sequence[int]) -> Sequence[MemoFiche]:
        """Titres et thèmes des fiches demandées ; les absentes et celles non accessibles sont omises."""
        if not ids:
            raise InvalidRequestError("La liste d'identifiants ne peut pas être vide.")
        return [f for f in self.repo.get_many(ids) if self.policy.can_access_fiche(user, f)]

    # ---------- Écriture ----------
    def create(self, payload: MemoFicheCreate) -> MemoFiche:
        fiche = self.repo.create(**payload.model_dump(mode="json"))
        logger.info("Mémofiche créée : %s (%s)", fiche.id, fiche.title)
        self._reindex(fiche)
        return fiche

    def update(self, fiche_id: int, payload: MemoFicheUpdate) -> MemoFiche:
        fiche = self.get(fiche_id)
        changes = payload.model_dump(mode="json", exclude_unset=True)
        if not changes:
            return fiche
        fiche = self.repo.update(fiche, **changes)
        logger.info("Mémofiche mise à jour : %s (%s)", fiche.id, ", ".join(sorted(changes)))
        self._reindex(fiche)
        return fiche

    def delete(self, fiche_id: int) -> None:
        fiche = self.get(fiche_id)
        self.chunk_repo.delete_for_fiche(fiche.id, commit=False)
        self.repo.delete(fiche)
        logger.info("Mémofiche supprimée : %s", fiche_id)

    def _reindex(self, fiche: MemoFiche) -> None:
        if not self.auto_index:
            return
        try:
            self.knowledge_base.index_fiche(fiche)
        except PharmiaError:
            # la fiche reste enregistrée ; une reconstruction complète rattrapera l'index
            logger.error("Indexation automatique de la fiche %s en échec", fiche.id, exc_info=True)
