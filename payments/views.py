import logging

from drf_spectacular.utils import extend_schema, OpenApiTypes
from rest_framework import status, views

from accounts.permissions import IsAdmin, can_view_patient
from HospitalBackend.exceptions import NotFound, Unauthorized
from HospitalBackend.responses import success, success_list
from patients.models import Patient
from .models import Payment
from .serializers import PaymentCreateSerializer, PaymentDetailSerializer, PaymentSerializer, PaymentStatusSerializer
from .workflow import PaymentWorkflow

logger = logging.getLogger(__name__)


class PaymentListCreateView(views.APIView):
    """
    GET: every payment, latest first.
    POST: records a payment for a patient.
    """
    permission_classes = [IsAdmin]

    @extend_schema(responses={200: PaymentDetailSerializer(many=True)})
    def get(self, request):
        payments = Payment.objects.select_related('patient__user').order_by('-created_at')
        return success_list(PaymentDetailSerializer(payments, many=True).data)

    @extend_schema(request=PaymentCreateSerializer, responses={201: PaymentSerializer})
    def post(self, request):
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment = PaymentWorkflow().create(
            patient_id=data['patientId'],
            amount=data['amount'],
            appointment_id=data.get('appointmentId'),
            method=data.get('method', ''),
            status=data.get('status'),
            transaction_id=data.get('transactionId', ''),
        )
        return success(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class PaymentStatsView(views.APIView):
    permission_classes = [IsAdmin]

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return success(PaymentWorkflow().stats())


class PatientPaymentsView(views.APIView):
    """A patient's payments, visible to admins, the patient and their doctors."""

    @extend_schema(responses={200: PaymentSerializer(many=True)})
    def get(self, request, patient_id):
        try:
            patient = Patient.objects.get(pk=patient_id)
        except Patient.DoesNotExist:
            raise NotFound('Patient not found')
        if not can_view_patient(request.user, patient):
            raise Unauthorized("Not authorized to view this patient's payments")
        payments = patient.payments.order_by('-created_at')
        return success_list(PaymentSerializer(payments, many=True).data)


class PaymentStatusView(views.APIView):
    permission_classes = [IsAdmin]

    @extend_schema(request=PaymentStatusSerializer, responses={200: PaymentSerializer})
    def patch(self, request, pk):
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        workflow = PaymentWorkflow()
        payment = workflow.set_status(workflow.get(pk), serializer.validated_data['status'])
        logger.info(f"Payment {payment.pk} set to {payment.status} by {request.user.email}")
        return success(PaymentSerializer(payment).data)
