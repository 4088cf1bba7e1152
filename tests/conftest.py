# Standard Library
import copy
import os
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

# Configuration de test, avant tout import de l'application
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-pharmia-at-least-32-chars"
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["GEMINI_API_KEY"] = ""
os.environ["EMAIL_API_KEY"] = ""
os.environ["PUBLIC_APP_URL"] = "http://app.test"

# Third-Party Libraries
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

# First-Party Libraries
from pharmia.main import app
from pharmia.core.config import jwt_settings
from pharmia.core.exceptions import ServiceUnavailableError
from pharmia.db.session import get_session
from pharmia.db.models.base import utcnow
from pharmia.db.models.memofiches import MemoFiche
from pharmia.db.models.users import User, UserRole
from pharmia.api.v1.dependencies import get_ai_client, get_konnect_client, get_mailer
from pharmia.security.password import hash_password
from pharmia.security.tokens import create_access_token
from pharmia.utils.konnect import KonnectClient
from pharmia.utils.mailer import Mailer

DEFAULT_PASSWORD = "motdepasse123"


# --- Faux clients externes ---

class FakeAI:
    """Remplace GeminiClient : réponses configurables, embeddings déterministes."""

    def __init__(self):
        self.json_response: Any = {}
        self.text_response = "Réponse de l'assistant."
        self.error: Optional[Exception] = None
        self.prompts: List[str] = []
        self.text_calls: List[Dict[str, Any]] = []
        self.embed_calls: List[List[str]] = []

    def generate_json(self, prompt, *, response_schema, temperature=0.5):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return copy.deepcopy(self.json_response)

    def generate_text(self, prompt, *, system_instruction=None, history=(), temperature=0.6):
        if self.error:
            raise self.error
        self.text_calls.append(
            {"prompt": prompt, "system_instruction": system_instruction, "history": list(history)}
        )
        return self.text_response

    def embed(self, texts, *, task_type="retrieval_document"):
        if self.error:
            raise self.error
        self.embed_calls.append(list(texts))
        return [
            [1.0, float("rhinite" in t.lower()), float("pompe" in t.lower())]
            for t in texts
        ]

    def embed_query(self, text):
        return self.embed([text], task_type="retrieval_query")[0]


class FakeMailer(Mailer):
    """Mailer réel (rendu des templates compris), sans appel réseau."""

    def __init__(self):
        super().__init__(api_key=None, api_url="http://mail.test", sender_email="noreply@test", sender_name="Test")
        self.sent: List[Dict[str, str]] = []
        self.failing: set = set()

    def send(self, *, to, subject, html, text=None):
        if to in self.failing:
            raise ServiceUnavailableError("L'envoi de l'e-mail a échoué.")
        self.sent.append({"to": to, "subject": subject, "html": html})


class FakeKonnect(KonnectClient):
    def __init__(self):
        super().__init__(api_key="key", wallet_id="wallet", base_url="http://konnect.test")
        self.init_calls: List[Dict[str, Any]] = []
        self.payments: Dict[str, Dict[str, Any]] = {}

    def init_payment(self, **kwargs):
        self.init_calls.append(kwargs)
        ref = f"REF-{kwargs['order_id']}"
        return {"payUrl": f"https://pay.test/{ref}", "paymentRef": ref}

    def get_payment(self, payment_ref):
        return self.payments.get(payment_ref)


# --- Fixtures de base ---

@pytest.fixture
def engine():
    """Base SQLite en mémoire, partagée par toutes les connexions du test."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session

@pytest.fixture
def fake_ai():
    return FakeAI()

@pytest.fixture
def fake_mailer():
    return FakeMailer()

@pytest.fixture
def fake_konnect():
    return FakeKonnect()

@pytest.fixture
def client(session, fake_ai, fake_mailer, fake_konnect):
    def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_ai_client] = lambda: fake_ai
    app.dependency_overrides[get_mailer] = lambda: fake_mailer
    app.dependency_overrides[get_konnect_client] = lambda: fake_konnect
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- Fixtures utilisateurs et authentification ---

@pytest.fixture
def make_user(session) -> Callable[..., User]:
    """Crée un utilisateur ; inscrit depuis 30 jours par défaut (semaine d'essai terminée)."""

    def _make(
        username: str,
        role: UserRole = UserRole.PHARMACIEN,
        *,
        email: Optional[str] = "__default__",
        password: Optional[str] = DEFAULT_PASSWORD,
        days_since_signup: int = 30,
        **fields,
    ) -> User:
        user = User(
            username=username,
            email=f"{username}@pharmia.tn" if email == "__default__" else email,
            hashed_password=hash_password(password, 4) if password else None,
            role=role,
            first_name=fields.pop("first_name", username.capitalize()),
            last_name=fields.pop("last_name", "Test"),
            created_at=utcnow() - timedelta(days=days_since_signup),
            **fields,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make

@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token(
            user_id=user.id, email=user.email or "", role=user.role.value, settings=jwt_settings
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers

@pytest.fixture
def admin(make_user) -> User:
    return make_user("admin", UserRole.ADMIN)

@pytest.fixture
def formateur(make_user) -> User:
    return make_user("formateur", UserRole.FORMATEUR)

@pytest.fixture
def pharmacist(make_user) -> User:
    return make_user("pharmacien", UserRole.PHARMACIEN)

@pytest.fixture
def preparateur(make_user, pharmacist) -> User:
    return make_user("preparateur", UserRole.PREPARATEUR, pharmacist_id=pharmacist.id)


# --- Fixtures contenu ---

@pytest.fixture
def make_fiche(session) -> Callable[..., MemoFiche]:
    def _make(title: str = "Rhinite allergique saisonnière", **fields) -> MemoFiche:
        fiche = MemoFiche(
            title=title,
            theme=fields.pop("theme", "Allergies"),
            system=fields.pop("system", "ORL"),
            patient_situation=fields.pop(
                "patient_situation",
                "Une patiente de 32 ans éternue en salve depuis une semaine au printemps.",
            ),
            **fields,
        )
        session.add(fiche)
        session.commit()
        session.refresh(fiche)
        return fiche

    return _make
