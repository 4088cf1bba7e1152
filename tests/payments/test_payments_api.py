"""
Tests du paiement Konnect : initiation et webhook.
"""
from datetime import timedelta

from fastapi import status
from sqlmodel import select

from pharmia.api.v1.dependencies import get_konnect_client
from pharmia.core.exceptions import ServiceUnavailableError
from pharmia.db.models.base import utcnow
from pharmia.db.models.payments import Payment, PaymentStatus
from pharmia.main import app
from pharmia.utils.konnect import KonnectClient


def _initiate(client, user, auth_headers, **overrides):
    payload = {"plan_name": "Premium", "amount": 29.9, "is_annual": False}
    payload.update(overrides)
    return client.post("/api/payment/initiate", json=payload, headers=auth_headers(user))


def test_initiate_payment(client, session, pharmacist, fake_konnect, auth_headers):
    response = _initiate(client, pharmacist, auth_headers)
    assert response.status_code == status.HTTP_200_OK

    payment = session.exec(select(Payment)).one()
    assert response.json() == {"pay_url": f"https://pay.test/REF-{payment.id}"}
    assert payment.status == PaymentStatus.PENDING
    assert payment.payment_ref == f"REF-{payment.id}"

    call = fake_konnect.init_calls[0]
    assert call["amount_millimes"] == 29900
    assert call["order_id"] == str(payment.id)
    assert call["email"] == pharmacist.email
    assert call["webhook_url"].endswith("/api/payment/webhook/konnect")

def test_initiate_payment_not_configured(client, pharmacist, auth_headers):
    app.dependency_overrides[get_konnect_client] = lambda: KonnectClient(
        api_key=None, wallet_id=None, base_url="http://konnect.test"
    )
    response = _initiate(client, pharmacist, auth_headers)
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

def test_initiate_payment_konnect_error_marks_payment_failed(client, session, pharmacist, fake_konnect, auth_headers):
    def unreachable(**kwargs):
        raise ServiceUnavailableError("Impossible d'initier le paiement.")

    fake_konnect.init_payment = unreachable
    response = _initiate(client, pharmacist, auth_headers)
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    payment = session.exec(select(Payment)).one()
    session.refresh(payment)
    assert payment.status == PaymentStatus.FAILED
    assert payment.payment_ref is None

def test_initiate_payment_validation(client, pharmacist, auth_headers):
    assert _initiate(client, pharmacist, auth_headers, amount=0).status_code == 422
    assert client.post("/api/payment/initiate", json={"plan_name": "Premium", "amount": 10}).status_code == 401

def test_webhook_completed_activates_subscription_once(client, session, pharmacist, fake_konnect, auth_headers):
    _initiate(client, pharmacist, auth_headers, is_annual=True)
    payment = session.exec(select(Payment)).one()
    fake_konnect.payments[payment.payment_ref] = {"status": "completed"}

    url = f"/api/payment/webhook/konnect?payment_ref={payment.payment_ref}"
    response = client.get(url)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "completed"

    session.refresh(pharmacist)
    assert pharmacist.has_active_subscription is True
    assert pharmacist.plan_name == "Premium"
    first_end = pharmacist.subscription_end_date
    assert first_end - utcnow() > timedelta(days=364)

    # une seconde notification ne prolonge pas l'abonnement
    assert client.get(url).json()["status"] == "completed"
    session.refresh(pharmacist)
    assert pharmacist.subscription_end_date == first_end

def test_webhook_failed_payment(client, session, pharmacist, fake_konnect, auth_headers):
    _initiate(client, pharmacist, auth_headers)
    payment = session.exec(select(Payment)).one()
    fake_konnect.payments[payment.payment_ref] = {"status": "failed"}

    response = client.get(f"/api/payment/webhook/konnect?payment_ref={payment.payment_ref}")
    assert response.json()["status"] == "failed"
    session.refresh(pharmacist)
    assert pharmacist.has_active_subscription is False

def test_webhook_pending_keeps_status(client, session, pharmacist, fake_konnect, auth_headers):
    _initiate(client, pharmacist, auth_headers)
    payment = session.exec(select(Payment)).one()
    fake_konnect.payments[payment.payment_ref] = {"status": "pending"}
    response = client.get(f"/api/payment/webhook/konnect?payment_ref={payment.payment_ref}")
    assert response.json()["status"] == "pending"

def test_webhook_unknown_reference(client, fake_konnect):
    assert client.get("/api/payment/webhook/konnect?payment_ref=INCONNU").status_code == 404

    fake_konnect.payments["ORPHELIN"] = {"status": "completed"}
    assert client.get("/api/payment/webhook/konnect?payment_ref=ORPHELIN").status_code == 404
