import logging

from pharmia.features.contact.schemas import ContactIn
from pharmia.utils.mailer import Mailer

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, *, mailer: Mailer, contact_email: str):
        self.mailer = mailer
        self.contact_email = contact_email

    def send(self, payload: ContactIn) -> None:
        self.mailer.send_template(
            to=self.contact_email,
            subject=f"Nouveau message de contact: {payload.subject}",
            template_name="contact.html",
            context=payload.model_dump(),
        )
        logger.info("Message de contact transmis (%s)", payload.subject)
