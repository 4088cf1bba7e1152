"""
Prompts (en français) et schémas de réponse JSON pour la génération de mémofiches.

Les schémas suivent le sous-ensemble OpenAPI accepté par Gemini (types en majuscules).
"""

from typing import Any, Dict, Optional

_STRING = {"type": "STRING"}
_STRING_LIST = {"type": "ARRAY", "items": _STRING}


def _object(properties: Dict[str, Any], required=None, description: Optional[str] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "OBJECT", "properties": properties}
    schema["required"] = list(required if required is not None else properties)
    if description:
        schema["description"] = description
    return schema


def _array(items: Dict[str, Any], description: str) -> Dict[str, Any]:
    return {"type": "ARRAY", "items": items, "description": description}


RECOMMENDATIONS_SCHEMA = _object(
    {
        "main_treatment": _STRING_LIST,
        "associated_products": _STRING_LIST,
        "lifestyle_advice": _STRING_LIST,
        "dietary_advice": _STRING_LIST,
    },
    description="Recommandations structurées en quatre catégories distinctes.",
)

FLASHCARDS_SCHEMA = _array(_object({"question": _STRING, "answer": _STRING}), "10 flashcards question/réponse.")
GLOSSARY_SCHEMA = _array(_object({"term": _STRING, "definition": _STRING}), "10 termes techniques et leur définition.")
MEDIA_SCHEMA = _array(
    _object(
        {
            "title": _STRING,
            "description": _STRING,
            "type": {"type": "STRING", "enum": ["video", "infographic"]},
        }
    ),
    "1 à 2 suggestions de médias, sans URL.",
)
QUIZ_SCHEMA = _array(
    _object(
        {
            "question": _STRING,
            "options": _STRING_LIST,
            "correct_answer_index": {"type": "INTEGER"},
            "explanation": _STRING,
            "type": {"type": "STRING", "enum": ["single-choice", "true-false"]},
        }
    ),
    "10 questions de quiz (QCM à 4 options ou Vrai/Faux).",
)

_COMMON = {
    "title": _STRING,
    "short_description": _STRING,
    "key_points": _STRING_LIST,
    "references": _STRING_LIST,
    "flashcards": FLASHCARDS_SCHEMA,
    "glossary": GLOSSARY_SCHEMA,
    "media": MEDIA_SCHEMA,
    "quiz": QUIZ_SCHEMA,
}

RESPONSE_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "maladie": _object(
        {
            **_COMMON,
            "patient_situation": _STRING,
            "pathology_overview": _STRING,
            "key_questions": _STRING_LIST,
            "red_flags": _STRING_LIST,
            "recommendations": RECOMMENDATIONS_SCHEMA,
        }
    ),
    "pharmacologie": _object(
        {
            **_COMMON,
            "pathology_overview": _STRING,
            "memo_sections": _array(_object({"title": _STRING, "content": _STRING}), "Sections pharmacologiques."),
            "red_flags": _STRING_LIST,
            "recommendations": RECOMMENDATIONS_SCHEMA,
        }
    ),
    "exhaustive": _object(
        {
            **_COMMON,
            "pathology_overview": _STRING,
            "memo_sections": _array(_object({"title": _STRING, "content": _STRING}), "Sections détaillées couvrant tout le texte."),
        }
    ),
}

_SECTIONS_COMMUNES = """
      - "key_points" : 3 à 4 points clés ultra-concis.
      - "references" : 1 à 3 références bibliographiques pertinentes.
      - "flashcards" : 10 flashcards (question/réponse).
      - "glossary" : 10 termes techniques définis.
      - "media" : 1 à 2 supports médias (vidéo, infographie). Ne génère pas d'URL.
      - "quiz" : 10 questions (mélange de QCM à 4 options et de Vrai/Faux). Pour Vrai/Faux, les options sont
        ["Vrai", "Faux"] et correct_answer_index vaut 0 pour "Vrai", 1 pour "Faux".
"""


def build_prompt(
    memo_fiche_type: str,
    source_text: str,
    *,
    theme: Optional[str] = None,
    system: Optional[str] = None,
    pathology: Optional[str] = None,
) -> str:
    theme = theme or "Général"
    system = system or "Général"

    if memo_fiche_type == "pharmacologie":
        intro = f"""
      À partir du texte suivant, génère une mémofiche de pharmacologie pour un étudiant en pharmacie.
      Elle porte sur les médicaments utilisés dans la prise en charge de "{pathology or theme}" (thème "{theme}").
      Pour chaque classe thérapeutique : mécanisme d'action, indications, effets indésirables, interactions
      et conseils au comptoir, chacun dans une entrée de "memo_sections".
      Inclus aussi "title", "short_description", "pathology_overview", "red_flags" et "recommendations"
      (quatre sous-sections : "main_treatment", "associated_products", "lifestyle_advice", "dietary_advice")."""
    elif memo_fiche_type == "exhaustive":
        intro = """
      À partir du texte suivant, génère une mémofiche exhaustive pour un étudiant en pharmacie.
      Couvre l'intégralité du texte sans rien omettre, organisée en "memo_sections" (titre + contenu détaillé).
      Inclus aussi "title", "short_description" et "pathology_overview"."""
    else:
        intro = f"""
      À partir du texte suivant, génère une mémofiche de cas de comptoir pour un étudiant en pharmacie.
      La mémofiche doit être pertinente pour le thème "{theme}" et le système/organe "{system}".
      Identifie un scénario patient plausible à partir du texte.
      Inclus "title", "short_description", "patient_situation", "pathology_overview", "key_questions", "red_flags"
      et "recommendations" (quatre sous-sections : "main_treatment", "associated_products", "lifestyle_advice",
      "dietary_advice")."""

    return f"""{intro}
      Le ton doit être professionnel et didactique.

      Inclus également :{_SECTIONS_COMMUNES}
      Texte source :
      ---
      {source_text}
      ---

      Génère la réponse au format JSON en respectant le schéma fourni.
    """
