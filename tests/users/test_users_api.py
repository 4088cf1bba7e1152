"""
Tests des endpoints comptes : profil, annuaire, rattachement, parcours d'apprentissage.
"""
from fastapi import status

from pharmia.db.models.users import UserRole
from pharmia.security.password import verify_password


def test_update_profile(client, session, preparateur, make_user, auth_headers):
    other_pharmacist = make_user("autrepharma", UserRole.PHARMACIEN)
    response = client.put(
        "/api/user/profile",
        json={"first_name": "Amine", "phone_number": "+21655000000", "pharmacist_id": other_pharmacist.id},
        headers=auth_headers(preparateur),
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["first_name"] == "Amine"
    assert data["phone_number"] == "+21655000000"
    assert data["pharmacist_id"] == other_pharmacist.id

def test_update_profile_password_and_email_conflict(client, session, pharmacist, admin, auth_headers):
    response = client.put("/api/user/profile", json={"email": admin.email}, headers=auth_headers(pharmacist))
    assert response.status_code == status.HTTP_409_CONFLICT

    response = client.put("/api/user/profile", json={"password": "nouveaumotdepasse"}, headers=auth_headers(pharmacist))
    assert response.status_code == status.HTTP_200_OK
    session.refresh(pharmacist)
    assert verify_password("nouveaumotdepasse", pharmacist.hashed_password)

def test_update_profile_rejects_password_over_72_bytes(client, session, pharmacist, auth_headers):
    response = client.put("/api/user/profile", json={"password": "c" * 80}, headers=auth_headers(pharmacist))
    assert response.status_code == 422
    session.refresh(pharmacist)
    assert verify_password("motdepasse123", pharmacist.hashed_password)

def test_update_profile_rejects_invalid_pharmacist(client, preparateur, formateur, auth_headers):
    response = client.put(
        "/api/user/profile", json={"pharmacist_id": formateur.id}, headers=auth_headers(preparateur)
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_update_profile_requires_auth(client):
    assert client.put("/api/user/profile", json={"first_name": "X"}).status_code == status.HTTP_401_UNAUTHORIZED

def test_list_pharmacists_is_public(client, pharmacist, preparateur):
    response = client.get("/api/users/pharmacists")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [p["id"] for p in data] == [pharmacist.id]
    assert set(data[0]) == {"id", "email", "first_name", "last_name"}

def test_list_preparateurs_admin_only(client, admin, pharmacist, preparateur, auth_headers):
    assert client.get("/api/users/preparateurs", headers=auth_headers(pharmacist)).status_code == 403
    response = client.get("/api/users/preparateurs", headers=auth_headers(admin))
    assert response.status_code == status.HTTP_200_OK
    assert [u["username"] for u in response.json()] == ["preparateur"]

def test_assign_pharmacist(client, admin, pharmacist, preparateur, make_user, auth_headers):
    other = make_user("autrepharma", UserRole.PHARMACIEN)
    url = f"/api/users/{preparateur.id}/assign-pharmacist"

    response = client.put(url, json={"pharmacist_id": other.id}, headers=auth_headers(admin))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["pharmacist_id"] == other.id

    response = client.put(url, json={"pharmacist_id": None}, headers=auth_headers(admin))
    assert response.json()["pharmacist_id"] is None
    assert response.json()["profile_incomplete"] is True

    # la cible doit être un préparateur, le référent un pharmacien
    response = client.put(
        f"/api/users/{pharmacist.id}/assign-pharmacist", json={"pharmacist_id": other.id}, headers=auth_headers(admin)
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    response = client.put(url, json={"pharmacist_id": admin.id}, headers=auth_headers(admin))
    assert response.status_code == status.HTTP_400_BAD_REQUEST

def test_preparateurs_by_pharmacist(client, pharmacist, preparateur, formateur, make_user, auth_headers):
    url = f"/api/users/preparateurs-by-pharmacist/{pharmacist.id}"

    response = client.get(url, headers=auth_headers(pharmacist))
    assert response.status_code == status.HTTP_200_OK
    assert [u["id"] for u in response.json()] == [preparateur.id]

    assert client.get(url, headers=auth_headers(formateur)).status_code == status.HTTP_200_OK

    intrus = make_user("intrus", UserRole.PHARMACIEN)
    assert client.get(url, headers=auth_headers(intrus)).status_code == status.HTTP_403_FORBIDDEN

def test_learning_journey_permissions(client, pharmacist, preparateur, formateur, make_user, auth_headers):
    url = f"/api/users/{preparateur.id}/learning-journey"

    for viewer in (preparateur, pharmacist, formateur):
        response = client.get(url, headers=auth_headers(viewer))
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"read_fiche_ids": [], "viewed_media_ids": [], "quiz_history": []}

    intrus = make_user("intrus", UserRole.PHARMACIEN)
    assert client.get(url, headers=auth_headers(intrus)).status_code == status.HTTP_403_FORBIDDEN
    assert client.get("/api/users/9999/learning-journey", headers=auth_headers(formateur)).status_code == 404

def test_get_user(client, pharmacist, auth_headers):
    response = client.get(f"/api/users/{pharmacist.id}", headers=auth_headers(pharmacist))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["username"] == "pharmacien"
    assert client.get("/api/users/9999", headers=auth_headers(pharmacist)).status_code == 404

def test_update_profile_lowercases_email(client, session, pharmacist, admin, auth_headers):
    response = client.put("/api/user/profile", json={"email": admin.email.upper()}, headers=auth_headers(pharmacist))
    assert response.status_code == status.HTTP_409_CONFLICT

    response = client.put("/api/user/profile", json={"email": "Nour.Pharma@Pharmia.tn"}, headers=auth_headers(pharmacist))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["email"] == "nour.pharma@pharmia.tn"
