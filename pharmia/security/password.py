"""Hachage et vérification des mots de passe (bcrypt)."""

import logging
from typing import Annotated, Optional

import bcrypt
from pydantic import AfterValidator, StringConstraints

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10
# bcrypt ne hache que les 72 premiers octets et refuse au-delà
MAX_PASSWORD_BYTES = 72


def check_password_bytes(password: str) -> str:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Le mot de passe ne doit pas dépasser {MAX_PASSWORD_BYTES} octets.")
    return password


# Type des champs "mot de passe" des schémas d'entrée
PasswordStr = Annotated[
    str, StringConstraints(min_length=8, max_length=MAX_PASSWORD_BYTES), AfterValidator(check_password_bytes)
]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Génère le hash bcrypt d'un mot de passe."""
    salt = bcrypt.gensalt(rounds=rounds or DEFAULT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Vérifie un mot de passe en clair contre un hash bcrypt. Un hash absent ne correspond jamais."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Hash de mot de passe illisible en base, vérification refusée.")
        return False
