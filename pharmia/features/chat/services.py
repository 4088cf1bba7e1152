"""
➡️ But : Assistants conversationnels.

- custom_chat()     : chat libre, ancré dans les fragments les plus proches de la base de connaissances
- fiche_assistant() : tuteur d'une mémofiche, qui ne répond qu'à partir du contenu de la fiche
"""

import logging
from typing import Dict, List, Sequence

from pharmia.db.models.memofiches import MemoFiche
from pharmia.features.chat.schemas import ChatSource, ChatTurn, CustomChatIn, CustomChatOut
from pharmia.features.knowledge_base.services import KnowledgeBaseService
from pharmia.features.memofiches.schemas import ChatMessage
from pharmia.utils.gemini import GeminiClient

logger = logging.getLogger(__name__)

CUSTOM_CHAT_INSTRUCTION = """
Tu es "PharmIA", un assistant expert en pharmacie d'officine qui accompagne pharmaciens et préparateurs.
Appuie-toi en priorité sur les extraits de mémofiches fournis. Si les extraits ne suffisent pas,
dis-le clairement avant de compléter avec des connaissances générales prudentes.
Réponds en français, de manière concise, structurée et professionnelle.
Rappelle d'orienter vers un médecin dès qu'un signal d'alerte est évoqué.
"""

FICHE_ASSISTANT_INSTRUCTION = """
Tu es "PharmIA", un assistant pédagogique expert en pharmacie.
Ton rôle est d'aider un étudiant à approfondir sa compréhension d'un cas de comptoir.
{fiche_context}
Réponds aux questions de l'étudiant de manière concise, claire et encourageante.
Base tes réponses UNIQUEMENT sur les informations fournies dans le cas. Ne spécule pas et n'ajoute pas d'informations extérieures.
Si une question sort du cadre du cas, réponds poliment que tu ne peux répondre qu'aux questions relatives à la mémofiche.
Adopte un ton amical et professionnel. Ne te présente pas à nouveau.
"""


def to_provider_history(turns: Sequence[ChatTurn | ChatMessage]) -> List[Dict[str, str]]:
    # le fournisseur nomme "model" les tours de l'assistant
    return [
        {"role": "user" if t.role == "user" else "model", "content": t.content}
        for t in turns
        if t.content.strip()
    ]


def describe_fiche(fiche: MemoFiche) -> str:
    reco = fiche.recommendations or {}

    def joined(values) -> str:
        return ", ".join(values or []) or "-"

    lines = [
        "Voici le contexte de l'étude de cas sur laquelle tu dois te baser :",
        f"- Titre : {fiche.title}",
        f"- Situation : {fiche.patient_situation or '-'}",
        f"- Pathologie : {fiche.pathology_overview or '-'}",
        f"- Questions clés : {joined(fiche.key_questions)}",
        (
            f"- Recommandations : Traitement : {joined(reco.get('main_treatment'))} ; "
            f"Produits associés : {joined(reco.get('associated_products'))} ; "
            f"Hygiène de vie : {joined(reco.get('lifestyle_advice'))} ; "
            f"Alimentation : {joined(reco.get('dietary_advice'))}"
        ),
        f"- Signaux d'alerte : {joined(fiche.red_flags)}",
        f"- Points clés : {joined(fiche.key_points)}",
    ]
    for section in fiche.memo_sections or []:
        lines.append(f"- {section.get('title', '')} : {section.get('content', '')}")
    return "\n".join(lines)


class ChatService:
    def __init__(self, *, ai: GeminiClient, knowledge_base: KnowledgeBaseService, top_k: int = 5):
        self.ai = ai
        self.knowledge_base = knowledge_base
        self.top_k = top_k

    def custom_chat(self, payload: CustomChatIn) -> CustomChatOut:
        hits = self.knowledge_base.search(payload.user_message, top_k=self.top_k)
        excerpts = "\n\n".join(chunk.content for chunk, _ in hits) or "(aucun extrait pertinent)"

        prompt_parts = [f"Extraits de mémofiches :\n---\n{excerpts}\n---"]
        if payload.context:
            prompt_parts.append(f"Contexte fourni par l'utilisateur : {payload.context}")
        prompt_parts.append(f"Question : {payload.user_message}")

        answer = self.ai.generate_text(
            "\n\n".join(prompt_parts),
            system_instruction=CUSTOM_CHAT_INSTRUCTION,
            history=to_provider_history(payload.chat_history),
        )
        logger.info("Chat libre : %d extraits utilisés", len(hits))
        return CustomChatOut(
            response=answer,
            sources=[
                ChatSource(
                    fiche_id=chunk.source_fiche_id,
                    fiche_title=chunk.source_fiche_title,
                    section=chunk.section,
                    score=score,
                )
                for chunk, score in hits
            ],
        )

    def fiche_assistant(self, fiche: MemoFiche, messages: Sequence[ChatMessage]) -> str:
        *history, last = messages
        return self.ai.generate_text(
            last.content,
            system_instruction=FICHE_ASSISTANT_INSTRUCTION.format(fiche_context=describe_fiche(fiche)),
            history=to_provider_history(history),
        )
