"""
Tests des endpoints /api/admin (réservés aux administrateurs).
"""
from datetime import timedelta

from fastapi import status
from sqlmodel import select

from pharmia.core.exceptions import ServiceUnavailableError
from pharmia.db.models.base import utcnow
from pharmia.db.models.memofiche_chunks import MemoFicheChunk
from pharmia.db.models.users import UserRole


def test_admin_routes_reject_non_admins(client, formateur, auth_headers):
    assert client.get("/api/admin/subscribers").status_code == status.HTTP_401_UNAUTHORIZED
    for method, url in (
        ("get", "/api/admin/subscribers"),
        ("post", "/api/admin/cleanup-read-fiches"),
        ("post", "/api/admin/update-knowledge-base"),
    ):
        response = getattr(client, method)(url, headers=auth_headers(formateur))
        assert response.status_code == status.HTTP_403_FORBIDDEN

def test_subscribers_overview(client, admin, pharmacist, preparateur, make_user, auth_headers):
    make_user("seul", UserRole.PHARMACIEN, has_active_subscription=True, subscription_end_date=utcnow() + timedelta(days=5))

    response = client.get("/api/admin/subscribers", headers=auth_headers(admin))
    assert response.status_code == status.HTTP_200_OK
    by_username = {item["username"]: item for item in response.json()}
    assert set(by_username) == {"pharmacien", "seul"}
    assert [c["id"] for c in by_username["pharmacien"]["collaborators"]] == [preparateur.id]
    assert by_username["seul"]["collaborators"] == []
    assert by_username["seul"]["has_active_subscription"] is True

def test_grant_subscription(client, session, admin, pharmacist, auth_headers):
    before = utcnow()
    response = client.post(
        "/api/admin/grant-subscription",
        json={"user_id": pharmacist.id, "duration_in_days": 30, "plan_name": "Premium"},
        headers=auth_headers(admin),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["plan_name"] == "Premium"

    session.refresh(pharmacist)
    assert pharmacist.has_active_subscription is True
    assert timedelta(days=29) < pharmacist.subscription_end_date - before <= timedelta(days=30, seconds=5)

def test_grant_subscription_validation(client, admin, auth_headers):
    response = client.post(
        "/api/admin/grant-subscription",
        json={"user_id": 9999, "duration_in_days": 30, "plan_name": "Premium"},
        headers=auth_headers(admin),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.post(
        "/api/admin/grant-subscription",
        json={"user_id": 1, "duration_in_days": 0, "plan_name": "Premium"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 422

def test_cleanup_read_fiches(client, session, make_user, make_fiche, auth_headers):
    fiche = make_fiche()
    admin = make_user("admin", UserRole.ADMIN, read_fiche_ids=[fiche.id, 404, 405])

    response = client.post("/api/admin/cleanup-read-fiches", headers=auth_headers(admin))
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"cleaned_count": 2}
    session.refresh(admin)
    assert admin.read_fiche_ids == [fiche.id]

    response = client.post("/api/admin/cleanup-read-fiches", headers=auth_headers(admin))
    assert response.json() == {"cleaned_count": 0}

def test_update_knowledge_base_replaces_chunks(client, admin, make_fiche, fake_ai, auth_headers):
    make_fiche()
    headers = auth_headers(admin)
    first = client.post("/api/admin/update-knowledge-base", headers=headers).json()
    second = client.post("/api/admin/update-knowledge-base", headers=headers).json()
    assert first == second == {"processed": 1, "chunks": 2}
    assert len(fake_ai.embed_calls) == 2

def test_update_knowledge_base_indexes_every_fiche(client, session, admin, make_fiche, auth_headers):
    fiches = [
        make_fiche("Rhinite allergique saisonnière"),
        make_fiche("Inhibiteurs de la pompe à protons", theme="Digestion"),
        make_fiche("Constipation occasionnelle de l'adulte", theme="Digestion"),
    ]
    response = client.post("/api/admin/update-knowledge-base", headers=auth_headers(admin))
    assert response.json() == {"processed": 3, "chunks": 6}

    indexed = {c.source_fiche_id for c in session.exec(select(MemoFicheChunk)).all()}
    assert indexed == {f.id for f in fiches}

def test_update_knowledge_base_failure_keeps_previous_index(client, session, admin, make_fiche, fake_ai, auth_headers):
    make_fiche()
    headers = auth_headers(admin)
    assert client.post("/api/admin/update-knowledge-base", headers=headers).json()["chunks"] == 2

    fake_ai.error = ServiceUnavailableError("Le service d'IA est momentanément indisponible.")
    response = client.post("/api/admin/update-knowledge-base", headers=headers)
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert len(session.exec(select(MemoFicheChunk)).all()) == 2
