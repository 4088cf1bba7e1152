"""
➡️ But : Isoler tous les appels à l'IA générative (Gemini).

GeminiClient expose trois opérations utilisées par les services :
- generate_json() : sortie JSON contrainte par un schéma de réponse
- generate_text() : réponse libre (assistants de chat), avec historique
- embed()         : embeddings des fragments de la base de connaissances

Les erreurs transitoires du fournisseur (indisponible, quota, délai, erreur interne)
sont réessayées avec un délai exponentiel ; les erreurs permanentes ne le sont pas.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from pharmia.core.exceptions import GenerationError, ServiceUnavailableError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.TooManyRequests,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
)


class GeminiClient:
    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: str,
        embedding_model: str,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        sleep_fn: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key
        self.model_name = model
        self.embedding_model = embedding_model
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.sleep_fn = sleep_fn
        if api_key:
            genai.configure(api_key=api_key)

    # ---------- Retry ----------
    def _call(self, operation: str, fn: Callable[[], Any]) -> Any:
        if not self.api_key:
            raise ServiceUnavailableError("Le service d'IA n'est pas configuré (GEMINI_API_KEY manquante).")

        def log_retry(state: RetryCallState) -> None:
            logger.warning(
                "Gemini %s : erreur transitoire (%s), nouvel essai dans %.1fs",
                operation, state.outcome.exception(), state.next_action.sleep,
            )

        retrying = Retrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.base_delay, max=self.max_delay),
            sleep=self.sleep_fn,
            before_sleep=log_retry,
            reraise=True,
        )
        try:
            return retrying(fn)
        except TRANSIENT_ERRORS as exc:
            logger.error("Gemini %s : échec après %d tentatives", operation, self.max_retries, exc_info=True)
            raise ServiceUnavailableError("Le service d'IA est momentanément indisponible.") from exc
        except google_exceptions.GoogleAPIError as exc:
            logger.error("Gemini %s : erreur permanente", operation, exc_info=True)
            raise GenerationError(f"Erreur du fournisseur d'IA : {exc}") from exc

    # ---------- Génération ----------
    def generate_json(self, prompt: str, *, response_schema: Dict[str, Any], temperature: float = 0.5) -> Any:
        """Demande une sortie JSON conforme à `response_schema` et la retourne décodée."""
        model = genai.GenerativeModel(self.model_name)
        config = genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=response_schema,
            temperature=temperature,
        )
        response = self._call("generate_json", lambda: model.generate_content(prompt, generation_config=config))
        try:
            return json.loads(response.text)
        except (ValueError, TypeError) as exc:
            logger.error("Réponse JSON illisible du modèle")
            raise GenerationError("La réponse de l'IA n'est pas un JSON valide.") from exc

    def generate_text(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        history: Sequence[Dict[str, str]] = (),
        temperature: float = 0.6,
    ) -> str:
        """
        Réponse libre. `history` : [{"role": "user" | "model", "content": "..."}], du plus ancien au plus récent.
        """
        model = genai.GenerativeModel(self.model_name, system_instruction=system_instruction)
        contents = [{"role": turn["role"], "parts": [turn["content"]]} for turn in history]
        contents.append({"role": "user", "parts": [prompt]})
        config = genai.GenerationConfig(temperature=temperature)
        response = self._call("generate_text", lambda: model.generate_content(contents, generation_config=config))
        try:
            return response.text
        except ValueError as exc:
            # réponse bloquée ou vide
            raise GenerationError("L'IA n'a renvoyé aucune réponse exploitable.") from exc

    # ---------- Embeddings ----------
    def embed(self, texts: List[str], *, task_type: str = "retrieval_document") -> List[List[float]]:
        """Un seul appel pour tout le lot ; retourne un vecteur par texte, dans l'ordre."""
        if not texts:
            return []
        result = self._call(
            "embed",
            lambda: genai.embed_content(model=self.embedding_model, content=list(texts), task_type=task_type),
        )
        vectors = result["embedding"]
        if len(vectors) != len(texts):
            raise GenerationError("Nombre d'embeddings inattendu.")
        return [list(v) for v in vectors]

    def embed_query(self, text: str) -> List[float]:
        return self.embed([text], task_type="retrieval_query")[0]
