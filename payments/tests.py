from decimal import Decimal

import pytest

from payments.models import Payment
from payments.workflow import PaymentWorkflow

pytestmark = pytest.mark.django_db


@pytest.fixture
def payments(patient, appointment):
    paid = Payment.objects.create(patient=patient, appointment=appointment, amount=100,
                                  status=Payment.PAID, method='Card')
    pending = Payment.objects.create(patient=patient, amount=50, method='Cash')
    return paid, pending


def test_stats(client_for, admin, payments):
    response = client_for(admin).get('/api/payments/stats/')

    assert response.status_code == 200
    assert response.data['data'] == {
        'totalRevenue': Decimal('100.00'), 'pendingAmount': Decimal('50.00'), 'completedPayments': 1,
    }


def test_stats_without_payments(db):
    assert PaymentWorkflow().stats() == {'totalRevenue': 0, 'pendingAmount': 0, 'completedPayments': 0}


def test_list_is_admin_only(client_for, admin, patient, payments):
    assert client_for(patient.user).get('/api/payments/').status_code == 403
    response = client_for(admin).get('/api/payments/')
    assert response.data['count'] == 2


def test_create(client_for, admin, patient, appointment):
    response = client_for(admin).post('/api/payments/', {
        'patientId': patient.pk, 'appointmentId': appointment.pk, 'amount': '500.00', 'method': 'Insurance',
    }, format='json')

    assert response.status_code == 201
    assert response.data['data']['status'] == 'Pending'
    assert response.data['data']['transactionId'] == ''


def test_create_paid_gets_transaction_id(client_for, admin, patient):
    response = client_for(admin).post('/api/payments/', {
        'patientId': patient.pk, 'amount': '80.00', 'status': 'Paid',
    }, format='json')
    assert response.data['data']['transactionId'].startswith('TXN-')


def test_create_for_unknown_patient(client_for, admin):
    response = client_for(admin).post('/api/payments/', {'patientId': 999, 'amount': '10.00'}, format='json')
    assert response.status_code == 404


def test_mark_paid_stamps_transaction(client_for, admin, payments):
    _, pending = payments
    response = client_for(admin).patch(f'/api/payments/{pending.pk}/', {'status': 'Paid'}, format='json')

    assert response.status_code == 200
    pending.refresh_from_db()
    assert pending.status == Payment.PAID
    assert pending.transaction_id.startswith('TXN-')


def test_paid_is_final(client_for, admin, payments):
    paid, _ = payments
    response = client_for(admin).patch(f'/api/payments/{paid.pk}/', {'status': 'Pending'}, format='json')
    assert response.status_code == 400


def test_failed_payment_can_be_retried(payments):
    _, pending = payments
    workflow = PaymentWorkflow()
    workflow.set_status(pending, Payment.FAILED)
    workflow.set_status(pending, Payment.PENDING)
    pending.refresh_from_db()
    assert pending.status == Payment.PENDING


def test_status_update_unknown_id(client_for, admin):
    response = client_for(admin).patch('/api/payments/999/', {'status': 'Paid'}, format='json')
    assert response.status_code == 404


def test_patient_payments_are_scoped(client_for, patient, other_patient, payments):
    response = client_for(patient.user).get(f'/api/payments/patient/{patient.pk}/')
    assert response.data['count'] == 2

    response = client_for(other_patient.user).get(f'/api/payments/patient/{patient.pk}/')
    assert response.status_code == 401
