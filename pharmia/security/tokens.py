"""
Jetons d'accès JWT (python-jose) : un seul type de jeton, signé HS256, vérifié sur l'émetteur.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypedDict

from jose import jwt


@dataclass(frozen=True)
class JWTSettings:
    """
    - `secret` : clé de signature (au moins 32 caractères, vérifié par la configuration)
    - `issuer` : claim `iss`, contrôlé au décodage
    - `algorithm` : algorithme de signature
    - `access_ttl` : durée de validité d'un jeton
    """
    secret: str
    issuer: str = "pharmia-api"
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(hours=1)


class DecodedToken(TypedDict, total=False):
    iss: str
    sub: str            # id de l'utilisateur
    email: str
    role: str           # UserRole
    typ: str            # toujours "access"
    jti: str
    iat: int
    exp: int


def create_access_token(*, user_id: int, email: str, role: str, settings: JWTSettings) -> str:
    issued_at = datetime.now(timezone.utc)
    claims: DecodedToken = {
        "iss": settings.issuer,
        "sub": str(user_id),
        "email": email,
        "role": role,
        "typ": "access",
        "jti": uuid.uuid4().hex,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + settings.access_ttl).timestamp()),
    }
    return jwt.encode(claims, settings.secret, algorithm=settings.algorithm)


def decode_token(token: str, settings: JWTSettings) -> DecodedToken:
    """Vérifie signature, expiration et émetteur. Lève jose.JWTError sinon."""
    return jwt.decode(
        token,
        settings.secret,
        algorithms=[settings.algorithm],
        issuer=settings.issuer,
        options={"verify_aud": False},
    )
