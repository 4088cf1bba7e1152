"""
Tests d'intégration pour les endpoints /api/auth.
"""
from datetime import timedelta

from fastapi import status

from pharmia.db.models.base import utcnow
from pharmia.db.models.users import User, UserRole
from pharmia.security.password import verify_password

DEFAULT_PASSWORD = "motdepasse123"

API = "/api/auth"


def _register_payload(**overrides):
    payload = {
        "email": "nouveau@pharmia.tn",
        "username": "nouveau",
        "password": "motdepasse123",
        "role": "PHARMACIEN",
        "first_name": "Nour",
        "last_name": "Saidi",
    }
    payload.update(overrides)
    return payload


# --- Inscription ---

def test_register_pharmacist(client, session):
    response = client.post(f"{API}/register", json=_register_payload())
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["username"] == "nouveau"
    assert data["role"] == "PHARMACIEN"
    assert data["profile_incomplete"] is False
    assert "hashed_password" not in data

    user = session.get(User, data["id"])
    assert verify_password("motdepasse123", user.hashed_password)

def test_register_duplicate_email_or_username(client, pharmacist):
    response = client.post(f"{API}/register", json=_register_payload(email=pharmacist.email))
    assert response.status_code == status.HTTP_409_CONFLICT

    response = client.post(f"{API}/register", json=_register_payload(username=pharmacist.username))
    assert response.status_code == status.HTTP_409_CONFLICT

def test_register_preparateur_requires_valid_pharmacist(client, pharmacist, formateur):
    response = client.post(f"{API}/register", json=_register_payload(role="PREPARATEUR"))
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post(f"{API}/register", json=_register_payload(role="PREPARATEUR", pharmacist_id=formateur.id))
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post(f"{API}/register", json=_register_payload(role="PREPARATEUR", pharmacist_id=pharmacist.id))
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["pharmacist_id"] == pharmacist.id

def test_register_cannot_self_assign_admin(client):
    response = client.post(f"{API}/register", json=_register_payload(role="ADMIN"))
    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_register_rejects_short_password(client):
    response = client.post(f"{API}/register", json=_register_payload(password="court"))
    assert response.status_code == 422

def test_register_rejects_password_over_72_bytes(client, session):
    # 80 caractères ASCII, puis 40 caractères accentués (80 octets en UTF-8)
    for password in ("a" * 80, "é" * 40):
        response = client.post(f"{API}/register", json=_register_payload(password=password))
        assert response.status_code == 422
    assert session.get(User, 1) is None

    response = client.post(f"{API}/register", json=_register_payload(password="a" * 72))
    assert response.status_code == status.HTTP_201_CREATED


# --- Connexion ---

def test_login_with_email_or_username(client, pharmacist):
    for identifier in (pharmacist.email, pharmacist.username):
        response = client.post(f"{API}/login", json={"identifier": identifier, "password": DEFAULT_PASSWORD})
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 3600
        assert data["user"]["id"] == pharmacist.id

    me = client.get(f"{API}/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["username"] == pharmacist.username

def test_login_bad_password_or_unknown_user(client, pharmacist):
    response = client.post(f"{API}/login", json={"identifier": pharmacist.username, "password": "mauvais-mdp"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = client.post(f"{API}/login", json={"identifier": "inconnu", "password": DEFAULT_PASSWORD})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_login_flags_incomplete_profile(client, make_user):
    make_user("sansnom", UserRole.PREPARATEUR, first_name=None)
    response = client.post(f"{API}/login", json={"identifier": "sansnom", "password": DEFAULT_PASSWORD})
    assert response.json()["user"]["profile_incomplete"] is True

def test_me_requires_valid_token(client):
    assert client.get(f"{API}/me").status_code == status.HTTP_401_UNAUTHORIZED
    response = client.get(f"{API}/me", headers={"Authorization": "Bearer pas-un-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"detail": "Jeton invalide ou expiré."}


# --- Mot de passe oublié / activation / réinitialisation ---

def test_forgot_password_sends_reset_link(client, session, pharmacist, fake_mailer):
    response = client.post(f"{API}/forgot-password", json={"identifier": pharmacist.username})
    assert response.status_code == status.HTTP_200_OK
    assert "migration_required" not in response.json() or response.json()["migration_required"] is False

    session.refresh(pharmacist)
    token = pharmacist.reset_password_token
    assert token and len(token) == 40
    assert pharmacist.reset_password_expires > utcnow()

    assert len(fake_mailer.sent) == 1
    assert fake_mailer.sent[0]["to"] == pharmacist.email
    assert f"http://app.test/#/reset-password?token={token}" in fake_mailer.sent[0]["html"]

def test_forgot_password_is_generic_for_unknown_identifier(client, pharmacist, fake_mailer):
    known = client.post(f"{API}/forgot-password", json={"identifier": pharmacist.email}).json()
    unknown = client.post(f"{API}/forgot-password", json={"identifier": "personne"}).json()
    assert known == unknown
    assert len(fake_mailer.sent) == 1

def test_forgot_password_migrated_account(client, make_user, fake_mailer):
    make_user("ancien", email=None, password=None)
    response = client.post(f"{API}/forgot-password", json={"identifier": "ancien"})
    assert response.json() == {"migration_required": True, "username": "ancien"}
    assert fake_mailer.sent == []

def test_initiate_activation(client, session, make_user, pharmacist, fake_mailer):
    migrated = make_user("ancien", email="ancien", password=None)

    assert client.post(f"{API}/initiate-activation", json={"username": "fantome", "email": "x@pharmia.tn"}).status_code == 404
    assert client.post(
        f"{API}/initiate-activation", json={"username": pharmacist.username, "email": "x@pharmia.tn"}
    ).status_code == 400
    assert client.post(
        f"{API}/initiate-activation", json={"username": "ancien", "email": pharmacist.email}
    ).status_code == 409

    response = client.post(f"{API}/initiate-activation", json={"username": "ancien", "email": "ancien@pharmia.tn"})
    assert response.status_code == status.HTTP_200_OK
    session.refresh(migrated)
    assert migrated.email == "ancien@pharmia.tn"
    assert migrated.reset_password_token
    assert fake_mailer.sent[-1]["subject"] == "Activez votre compte PharmIA"

def test_reset_password_flow(client, session, pharmacist):
    client.post(f"{API}/forgot-password", json={"identifier": pharmacist.email})
    session.refresh(pharmacist)
    token = pharmacist.reset_password_token

    response = client.post(f"{API}/reset-password", json={"token": token, "new_password": "nouveaumotdepasse"})
    assert response.status_code == status.HTTP_200_OK

    session.refresh(pharmacist)
    assert pharmacist.reset_password_token is None
    assert verify_password("nouveaumotdepasse", pharmacist.hashed_password)

    # jeton à usage unique
    response = client.post(f"{API}/reset-password", json={"token": token, "new_password": "encoreunautre"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_reset_password_expired_token(client, session, pharmacist):
    pharmacist.reset_password_token = "a" * 40
    pharmacist.reset_password_expires = utcnow() - timedelta(minutes=1)
    session.add(pharmacist)
    session.commit()

    response = client.post(f"{API}/reset-password", json={"token": "a" * 40, "new_password": "nouveaumotdepasse"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_reset_password_rejects_password_over_72_bytes(client, session, pharmacist):
    client.post(f"{API}/forgot-password", json={"identifier": pharmacist.email})
    session.refresh(pharmacist)
    token = pharmacist.reset_password_token

    response = client.post(f"{API}/reset-password", json={"token": token, "new_password": "b" * 80})
    assert response.status_code == 422
    session.refresh(pharmacist)
    assert pharmacist.reset_password_token == token
    assert verify_password(DEFAULT_PASSWORD, pharmacist.hashed_password)

def test_initiate_activation_mail_failure_keeps_account_activable(client, session, make_user, fake_mailer):
    migrated = make_user("ancien", email="ancien", password=None)
    fake_mailer.failing.add("ancien@pharmia.tn")

    response = client.post(f"{API}/initiate-activation", json={"username": "ancien", "email": "ancien@pharmia.tn"})
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    session.refresh(migrated)
    assert migrated.email == "ancien"
    assert migrated.reset_password_token is None

    fake_mailer.failing.clear()
    response = client.post(f"{API}/initiate-activation", json={"username": "ancien", "email": "ancien@pharmia.tn"})
    assert response.status_code == status.HTTP_200_OK
    session.refresh(migrated)
    assert migrated.email == "ancien@pharmia.tn"
    assert migrated.reset_password_token


# --- Casse des adresses e-mail ---

def test_emails_are_case_insensitive(client, session, pharmacist):
    response = client.post(f"{API}/register", json=_register_payload(email="Nouveau.Saidi@Pharmia.TN"))
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["email"] == "nouveau.saidi@pharmia.tn"

    response = client.post(f"{API}/login", json={"identifier": "NOUVEAU.SAIDI@pharmia.tn", "password": DEFAULT_PASSWORD})
    assert response.status_code == status.HTTP_200_OK

    response = client.post(
        f"{API}/register",
        json=_register_payload(username="autre", email=pharmacist.email.upper()),
    )
    assert response.status_code == status.HTTP_409_CONFLICT
