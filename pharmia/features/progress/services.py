"""
Suivi de progression : fiches lues et médias vus (ensembles), historique des quiz (ajout seul).

Les colonnes JSON sont réassignées avec une nouvelle liste pour que SQLAlchemy détecte la modification.
"""

from datetime import datetime
from typing import Callable

from pharmia.db.models.base import utcnow
from pharmia.db.models.users import User
from pharmia.db.repositories.memofiches import MemoFicheRepository
from pharmia.db.repositories.users import UserRepository
from pharmia.features.progress.schemas import QuizHistoryEntry, TrackQuizCompletionIn


class ProgressService:
    def __init__(
        self,
        user_repo: UserRepository,
        fiche_repo: MemoFicheRepository,
        *,
        now_fn: Callable[[], datetime] = utcnow,
    ):
        self.user_repo = user_repo
        self.fiche_repo = fiche_repo
        self.now_fn = now_fn

    def track_read_fiche(self, user: User, fiche_id: int) -> User:
        current = list(user.read_fiche_ids or [])
        if fiche_id in current:
            return user
        return self.user_repo.update(user, read_fiche_ids=current + [fiche_id])

    def track_media_view(self, user: User, media_id: str) -> User:
        current = list(user.viewed_media_ids or [])
        if media_id in current:
            return user
        return self.user_repo.update(user, viewed_media_ids=current + [media_id])

    def track_quiz_completion(self, user: User, payload: TrackQuizCompletionIn) -> User:
        entry = QuizHistoryEntry(
            quiz_id=payload.quiz_id,
            score=payload.score,
            fiche_id=payload.fiche_id,
            completed_at=self.now_fn(),
        )
        history = list(user.quiz_history or [])
        history.append(entry.model_dump(mode="json"))
        return self.user_repo.update(user, quiz_history=history)

    def cleanup_read_fiches(self, user: User) -> int:
        """Retire des fiches lues celles qui n'existent plus ; retourne le nombre retiré."""
        current = list(user.read_fiche_ids or [])
        existing_ids = self.fiche_repo.existing_ids(current)
        kept = [fid for fid in current if fid in existing_ids]
        removed = len(current) - len(kept)
        if removed:
            self.user_repo.update(user, read_fiche_ids=kept)
        return removed
