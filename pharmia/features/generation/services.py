import logging

from pydantic import ValidationError

from pharmia.core.exceptions import GenerationError
from pharmia.features.generation.prompts import RESPONSE_SCHEMAS, build_prompt
from pharmia.features.generation.schemas import GenerateIn, MemoFicheDraft
from pharmia.utils.gemini import GeminiClient

logger = logging.getLogger(__name__)


class GenerationService:
    """Génère un brouillon de mémofiche à partir d'un texte source (non enregistré)."""

    def __init__(self, ai: GeminiClient):
        self.ai = ai

    def generate(self, payload: GenerateIn) -> MemoFicheDraft:
        prompt = build_prompt(
            payload.memo_fiche_type,
            payload.source_text,
            theme=payload.theme,
            system=payload.system,
            pathology=payload.pathology,
        )
        raw = self.ai.generate_json(prompt, response_schema=RESPONSE_SCHEMAS[payload.memo_fiche_type])
        if not isinstance(raw, dict):
            raise GenerationError("La réponse de l'IA n'a pas la forme d'une mémofiche.")

        # type imposé par la demande ; thème et système complétés depuis la demande
        raw.update(memo_fiche_type=payload.memo_fiche_type)
        raw.setdefault("theme", payload.theme)
        raw.setdefault("system", payload.system)
        try:
            draft = MemoFicheDraft.model_validate(raw)
        except ValidationError as exc:
            logger.error("Brouillon IA invalide (%d erreurs) : %s", exc.error_count(), exc.errors()[:3])
            raise GenerationError("La mémofiche générée ne respecte pas le format attendu.") from exc

        logger.info("Mémofiche générée (%s) : %s", payload.memo_fiche_type, draft.title)
        return draft
