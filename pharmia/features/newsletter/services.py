import logging
from typing import List, Sequence
from urllib.parse import quote

from pharmia.core.exceptions import InvalidRequestError, NotFoundError, ServiceUnavailableError
from pharmia.db.models.subscribers import Subscriber
from pharmia.db.repositories.subscribers import SubscriberRepository
from pharmia.features.newsletter.schemas import NewsletterSendIn, NewsletterSendOut
from pharmia.utils.mailer import Mailer, render_template

logger = logging.getLogger(__name__)


def normalize_groups(groups: Sequence[str]) -> List[str]:
    """Supprime les espaces et les doublons en gardant l'ordre d'arrivée."""
    seen: List[str] = []
    for group in groups:
        name = group.strip()
        if name and name not in seen:
            seen.append(name)
    return seen


class NewsletterService:
    def __init__(self, *, repo: SubscriberRepository, mailer: Mailer, public_app_url: str):
        self.repo = repo
        self.mailer = mailer
        self.public_app_url = public_app_url.rstrip("/")

    # ---------- Abonnements publics ----------
    def subscribe(self, email: str) -> Subscriber:
        email = email.lower()
        if self.repo.get_by_email(email):
            raise InvalidRequestError("Cette adresse est déjà inscrite à la newsletter.")
        subscriber = self.repo.create(email=email, groups=[])
        logger.info("Nouvel abonné newsletter : %s", subscriber.id)
        return subscriber

    def unsubscribe(self, email: str) -> None:
        subscriber = self.repo.get_by_email(email)
        if subscriber:
            self.repo.delete(subscriber)
            logger.info("Désabonnement newsletter : %s", subscriber.id)

    # ---------- Gestion (admin) ----------
    def list(self) -> Sequence[Subscriber]:
        return self.repo.list_ordered()

    def all_groups(self) -> List[str]:
        return sorted({g for s in self.repo.list_ordered() for g in (s.groups or [])})

    def set_groups(self, subscriber_id: int, groups: Sequence[str]) -> Subscriber:
        subscriber = self.repo.get(subscriber_id)
        if not subscriber:
            raise NotFoundError("Abonné non trouvé.")
        return self.repo.update(subscriber, groups=normalize_groups(groups))

    def _recipients(self, groups: Sequence[str]) -> List[str]:
        wanted = set(normalize_groups(groups))
        subscribers = self.repo.list_ordered()
        if wanted:
            subscribers = [s for s in subscribers if wanted.intersection(s.groups or [])]
        return [s.email for s in subscribers]

    def _unsubscribe_url(self, email: str) -> str:
        return f"{self.public_app_url}/#/unsubscribe?email={quote(email)}"

    def send(self, payload: NewsletterSendIn) -> NewsletterSendOut:
        recipients = [payload.test_email] if payload.test_email else self._recipients(payload.groups)

        failed: List[str] = []
        for email in recipients:
            html = render_template(
                "newsletter.html",
                {"html_content": payload.html_content, "unsubscribe_url": self._unsubscribe_url(email)},
            )
            try:
                self.mailer.send(to=email, subject=payload.subject, html=html)
            except ServiceUnavailableError:
                failed.append(email)

        result = NewsletterSendOut(recipients=len(recipients), sent=len(recipients) - len(failed), failed=failed)
        logger.info("Newsletter « %s » : %d/%d envoyés", payload.subject, result.sent, result.recipients)
        if failed:
            logger.warning("Newsletter : %d envois en échec", len(failed))
        return result
