"""
Découpage d'une mémofiche en fragments textuels pour la recherche sémantique.

- les objets imbriqués sont aplatis (clés jointes par '.')
- une chaîne de plus de 20 caractères → un fragment
- une liste → un fragment par élément (`clé[i]`), les objets étant rendus "k: v; k: v"
- les champs techniques, les médias et les jeux (quiz, flashcards, glossaire) sont ignorés
"""

from dataclasses import dataclass
from typing import Any, Dict, List

IGNORED_FIELDS = (
    "id",
    "cover_image_url",
    "youtube_url",
    "kahoot_url",
    "knowledge_base_url",
    "created_at",
    "updated_at",
    "quiz",
    "flashcards",
    "media",
    "glossary",
    "source_text",
    "is_free",
)

MIN_CHUNK_LENGTH = 20


@dataclass(frozen=True)
class ChunkDraft:
    section: str
    content: str


def flatten(document: Dict[str, Any], parent_key: str = "") -> Dict[str, Any]:
    """{"a": {"b": "c"}} → {"a.b": "c"} ; les listes ne sont pas parcourues."""
    flat: Dict[str, Any] = {}
    for key, value in document.items():
        new_key = f"{parent_key}.{key}" if parent_key else key
        if isinstance(value, dict):
            flat.update(flatten(value, new_key))
        else:
            flat[new_key] = value
    return flat


def render_item(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return "; ".join(f"{k}: {v}" for k, v in item.items())
    return ""


def format_chunk(title: str, section: str, text: str) -> str:
    return f"Titre de la fiche: {title}\nSection: {section}\nContenu: {text}"


def chunk_fiche(document: Dict[str, Any]) -> List[ChunkDraft]:
    """`document` : la fiche sous forme de dict (model_dump)."""
    title = document.get("title") or ""
    chunks: List[ChunkDraft] = []

    for key, value in flatten(document).items():
        top_level = key.split(".", 1)[0]
        if top_level in IGNORED_FIELDS:
            continue

        if isinstance(value, str):
            text = value.strip()
            if len(text) > MIN_CHUNK_LENGTH:
                chunks.append(ChunkDraft(section=key, content=format_chunk(title, key, text)))
        elif isinstance(value, list):
            for index, item in enumerate(value):
                text = render_item(item).strip()
                if len(text) > MIN_CHUNK_LENGTH:
                    section = f"{key}[{index}]"
                    chunks.append(ChunkDraft(section=section, content=format_chunk(title, section, text)))

    return chunks
