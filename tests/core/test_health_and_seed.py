"""
Tests : endpoints de santé, gestion d'erreurs globale, données de développement.
"""
from sqlmodel import select

from pharmia.db.models.memofiches import MemoFiche
from pharmia.db.models.subscribers import Subscriber
from pharmia.db.models.users import User, UserRole
from pharmia.db.seed import DEFAULT_SEED_PATH, load_seed_yaml, seed_all
from pharmia.security.password import verify_password


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}

def test_db_health(client):
    response = client.get("/api/db-health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "reachable"}

def test_unauthenticated_error_shape(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"detail": "Authentification requise."}
    assert response.headers["www-authenticate"] == "Bearer"

def test_openapi_schema(client):
    schema = client.get("/openapi.json").json()
    assert schema["info"]["title"] == "PharmIA"
    assert "/api/memofiches/{fiche_id}/assistant" in schema["paths"]


def test_seed_all_is_idempotent(session):
    seed_all(session, DEFAULT_SEED_PATH, bcrypt_rounds=4)
    seed_all(session, DEFAULT_SEED_PATH, bcrypt_rounds=4)

    data = load_seed_yaml(DEFAULT_SEED_PATH)
    users = session.exec(select(User)).all()
    assert len(users) == len(data["users"])
    assert len(session.exec(select(MemoFiche)).all()) == len(data["memofiches"])
    assert len(session.exec(select(Subscriber)).all()) == len(data["subscribers"])

    by_username = {u.username: u for u in users}
    assert by_username["preparateur"].pharmacist_id == by_username["pharmacien"].id
    assert by_username["admin"].role == UserRole.ADMIN
    assert verify_password("ChangeMe-Admin-2024", by_username["admin"].hashed_password)

    migrated = by_username["ancien_membre"]
    assert migrated.hashed_password is None
    assert not migrated.has_valid_email
