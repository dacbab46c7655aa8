import logging
import uuid

from django.db.models import Count, Q, Sum

from appointments.models import Appointment
from HospitalBackend.exceptions import InvalidInput, NotFound
from HospitalBackend.workflow import StatusMachine
from patients.models import Patient
from .models import Payment

logger = logging.getLogger(__name__)

PAYMENT_STATUS = StatusMachine('payment', {
    Payment.PENDING: {Payment.PAID, Payment.FAILED},
    Payment.FAILED: {Payment.PENDING},
    Payment.PAID: set(),
})


def new_transaction_id():
    return f"TXN-{uuid.uuid4().hex[:12].upper()}"


class PaymentWorkflow:
    """
    Billing records and their Pending/Paid/Failed lifecycle.
    """

    def __init__(self, payments=None, patients=None, appointments=None):
        self.payments = payments if payments is not None else Payment.objects
        self.patients = patients if patients is not None else Patient.objects
        self.appointments = appointments if appointments is not None else Appointment.objects

    def get(self, payment_id):
        try:
            return self.payments.get(pk=payment_id)
        except Payment.DoesNotExist:
            raise NotFound('Payment not found')

    def create(self, patient_id, amount, appointment_id=None, method='', status=None, transaction_id=''):
        if not self.patients.filter(pk=patient_id).exists():
            raise NotFound('Patient not found')
        if appointment_id is not None and not self.appointments.filter(pk=appointment_id).exists():
            raise NotFound('Appointment not found')

        status = status or Payment.PENDING
        if status not in PAYMENT_STATUS.states:
            raise InvalidInput(f"'{status}' is not a valid payment status")
        if status == Payment.PAID and not transaction_id:
            transaction_id = new_transaction_id()

        payment = self.payments.create(
            patient_id=patient_id,
            appointment_id=appointment_id,
            amount=amount,
            method=method or '',
            status=status,
            transaction_id=transaction_id or '',
        )
        logger.info(f"Payment {payment.pk} of {payment.amount} recorded for patient {patient_id}")
        return payment

    def set_status(self, payment, status):
        if status == payment.status:
            return payment
        PAYMENT_STATUS.ensure(payment.status, status)
        logger.info(f"Payment {payment.pk}: {payment.status} -> {status}")
        payment.status = status
        fields = ['status', 'updated_at']
        if status == Payment.PAID and not payment.transaction_id:
            payment.transaction_id = new_transaction_id()
            fields.append('transaction_id')
        payment.save(update_fields=fields)
        return payment

    def stats(self):
        """
        Revenue collected, amount still pending and number of paid payments.
        """
        totals = self.payments.aggregate(
            total_revenue=Sum('amount', filter=Q(status=Payment.PAID)),
            pending_amount=Sum('amount', filter=Q(status=Payment.PENDING)),
            completed_payments=Count('id', filter=Q(status=Payment.PAID)),
        )
        return {
            'totalRevenue': totals['total_revenue'] or 0,
            'pendingAmount': totals['pending_amount'] or 0,
            'completedPayments': totals['completed_payments'],
        }
