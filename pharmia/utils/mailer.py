"""
➡️ But : Envoyer les e-mails transactionnels via l'API Brevo (HTTP, httpx).

Les corps HTML sont rendus avec Jinja2 depuis pharmia/templates/emails.
Sans EMAIL_API_KEY, le message est journalisé au lieu d'être envoyé (dev, tests).
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import jinja2

from pharmia.core.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"

env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=jinja2.select_autoescape(["html", "xml"]),
)


def render_template(template_name: str, context: Dict[str, Any]) -> str:
    """Rend un template e-mail. Un template manquant est une erreur de déploiement : on la laisse remonter."""
    return env.get_template(template_name).render(context)


class Mailer:
    def __init__(
        self,
        *,
        api_key: Optional[str],
        api_url: str,
        sender_email: str,
        sender_name: str,
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.timeout = timeout

    def send(self, *, to: str, subject: str, html: str, text: Optional[str] = None) -> None:
        """Envoie un e-mail. Lève ServiceUnavailableError si Brevo refuse ou ne répond pas."""
        if not self.api_key:
            logger.warning(
                "Envoi d'e-mail non configuré (EMAIL_API_KEY absente). À: %s | Sujet: %s\n%s",
                to, subject, html,
            )
            return

        payload: Dict[str, Any] = {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [{"email": to}],
            "subject": subject,
            "htmlContent": html,
        }
        if text:
            payload["textContent"] = text

        try:
            response = httpx.post(
                self.api_url,
                json=payload,
                headers={"api-key": self.api_key, "accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Brevo a refusé l'e-mail pour %s : %s", to, exc.response.text)
            raise ServiceUnavailableError("L'envoi de l'e-mail a échoué.") from exc
        except httpx.HTTPError as exc:
            logger.error("Brevo injoignable pour %s", to, exc_info=True)
            raise ServiceUnavailableError("L'envoi de l'e-mail a échoué.") from exc

        logger.info("E-mail envoyé à %s (%s)", to, subject)

    def send_template(self, *, to: str, subject: str, template_name: str, context: Dict[str, Any]) -> None:
        self.send(to=to, subject=subject, html=render_template(template_name, context))
