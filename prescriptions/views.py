import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action

from accounts.models import User
from accounts.permissions import (
    IsAdminOrPharmacist, IsDoctor, IsPharmacist, can_view_doctor, can_view_patient,
    doctor_profile, is_admin, patient_profile,
)
from doctors.models import Doctor
from HospitalBackend.exceptions import NotFound, Unauthorized
from HospitalBackend.responses import success, success_list
from patients.models import Patient
from .models import Prescription
from .serializers import (
    PharmacyDecisionSerializer, PrescriptionCreateSerializer, PrescriptionDetailSerializer,
    PrescriptionSerializer, PrescriptionUpdateSerializer,
)
from .workflow import PrescriptionWorkflow

logger = logging.getLogger(__name__)


def prescriptions():
    return Prescription.objects.select_related('patient__user', 'doctor__user')


def can_view_prescription(user, prescription):
    if user.role in (User.ADMIN, User.PHARMACIST):
        return True
    doctor = doctor_profile(user)
    if doctor is not None and prescription.doctor_id == doctor.pk:
        return True
    patient = patient_profile(user)
    return patient is not None and prescription.patient_id == patient.pk


class PharmacyDecisionMixin:
    """
    Pharmacist adjudication: approve, reject and dispense.
    Mounted under both the prescriptions and the pharmacy routes.
    """
    decision_actions = ['approve', 'reject', 'dispense']

    @extend_schema(request=PharmacyDecisionSerializer, responses={200: PrescriptionSerializer})
    @action(detail=True, methods=['patch'])
    def approve(self, request, pk=None):
        decision = PharmacyDecisionSerializer(data=request.data)
        decision.is_valid(raise_exception=True)
        workflow = self.get_workflow()
        prescription = workflow.approve(workflow.get(pk), decision.note_text())
        logger.info(f"Prescription {prescription.pk} approved by {request.user.email}")
        return success(PrescriptionSerializer(prescription).data, message='Prescription approved')

    @extend_schema(request=PharmacyDecisionSerializer, responses={200: PrescriptionSerializer})
    @action(detail=True, methods=['patch'])
    def reject(self, request, pk=None):
        decision = PharmacyDecisionSerializer(data=request.data)
        decision.is_valid(raise_exception=True)
        workflow = self.get_workflow()
        prescription = workflow.reject(workflow.get(pk), decision.note_text())
        logger.info(f"Prescription {prescription.pk} rejected by {request.user.email}")
        return success(PrescriptionSerializer(prescription).data, message='Prescription rejected')

    @extend_schema(request=PharmacyDecisionSerializer, responses={200: PrescriptionSerializer})
    @action(detail=True, methods=['patch'])
    def dispense(self, request, pk=None):
        decision = PharmacyDecisionSerializer(data=request.data)
        decision.is_valid(raise_exception=True)
        workflow = self.get_workflow()
        prescription = workflow.dispense(workflow.get(pk), decision.note_text())
        logger.info(f"Prescription {prescription.pk} dispensed by {request.user.email}")
        return success(PrescriptionSerializer(prescription).data, message='Prescription dispensed')


class PrescriptionViewSet(PharmacyDecisionMixin, viewsets.ViewSet):
    """
    Doctor-side prescriptions.
    Creating one completes the appointment it was written for.
    """
    workflow_class = PrescriptionWorkflow
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        if self.action in ['create', 'partial_update']:
            return [IsDoctor()]
        if self.action in self.decision_actions:
            return [IsPharmacist()]
        return super().get_permissions()

    def get_workflow(self):
        return self.workflow_class()

    @extend_schema(responses={200: PrescriptionDetailSerializer(many=True)})
    def list(self, request):
        user = request.user
        queryset = prescriptions()
        if user.role == User.DOCTOR:
            doctor = doctor_profile(user)
            queryset = queryset.filter(doctor=doctor) if doctor else queryset.none()
        elif user.role == User.PATIENT:
            patient = patient_profile(user)
            queryset = queryset.filter(patient=patient) if patient else queryset.none()
        elif not is_admin(user) and user.role != User.PHARMACIST:
            queryset = queryset.none()
        queryset = queryset.order_by('-created_at')
        return success_list(PrescriptionDetailSerializer(queryset, many=True).data)

    @extend_schema(request=PrescriptionCreateSerializer, responses={201: PrescriptionSerializer})
    def create(self, request):
        serializer = PrescriptionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        prescription = self.get_workflow().create(
            doctor=doctor_profile(request.user),
            appointment_id=data['appointmentId'],
            patient_id=data.get('patientId'),
            diagnosis=data['diagnosis'],
            medicines=data['medicines'],
            instructions=data['instructions'],
        )
        return success(PrescriptionSerializer(prescription).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: PrescriptionDetailSerializer})
    def retrieve(self, request, pk=None):
        prescription = self.get_workflow().get(pk)
        if not can_view_prescription(request.user, prescription):
            raise Unauthorized('Not authorized to view this prescription')
        return success(PrescriptionDetailSerializer(prescription).data)

    @extend_schema(request=PrescriptionUpdateSerializer, responses={200: PrescriptionSerializer})
    def partial_update(self, request, pk=None):
        workflow = self.get_workflow()
        prescription = workflow.get(pk)
        serializer = PrescriptionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prescription = workflow.update(prescription, doctor_profile(request.user), **serializer.validated_data)
        return success(PrescriptionSerializer(prescription).data)

    @extend_schema(responses={200: PrescriptionDetailSerializer(many=True)})
    @action(detail=False, methods=['get'], url_path=r'doctor/(?P<doctor_id>\d+)')
    def by_doctor(self, request, doctor_id=None):
        try:
            doctor = Doctor.objects.get(pk=doctor_id)
        except Doctor.DoesNotExist:
            raise NotFound('Doctor not found')
        if not can_view_doctor(request.user, doctor):
            raise Unauthorized("Not authorized to view this doctor's prescriptions")
        queryset = prescriptions().filter(doctor=doctor).order_by('-created_at')
        return success_list(PrescriptionDetailSerializer(queryset, many=True).data)

    @extend_schema(responses={200: PrescriptionDetailSerializer(many=True)})
    @action(detail=False, methods=['get'], url_path=r'patient/(?P<patient_id>\d+)')
    def by_patient(self, request, patient_id=None):
        try:
            patient = Patient.objects.get(pk=patient_id)
        except Patient.DoesNotExist:
            raise NotFound('Patient not found')
        if request.user.role != User.PHARMACIST and not can_view_patient(request.user, patient):
            raise Unauthorized("Not authorized to view this patient's prescriptions")
        queryset = prescriptions().filter(patient=patient).order_by('-created_at')
        return success_list(PrescriptionDetailSerializer(queryset, many=True).data)


class PharmacyPrescriptionViewSet(PharmacyDecisionMixin, viewsets.ViewSet):
    """
    Pharmacy queues and adjudication.
    PENDING prescriptions are approved or rejected; approved ones get dispensed.
    """
    workflow_class = PrescriptionWorkflow
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        if self.action in self.decision_actions:
            return [IsPharmacist()]
        return [IsAdminOrPharmacist()]

    def get_workflow(self):
        return self.workflow_class()

    def _queue(self, status_value):
        queryset = prescriptions().filter(status=status_value).order_by('-created_at')
        return success_list(PrescriptionDetailSerializer(queryset, many=True).data)

    @extend_schema(responses={200: PrescriptionDetailSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def pending(self, request):
        return self._queue(Prescription.PENDING)

    @extend_schema(responses={200: PrescriptionDetailSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def approved(self, request):
        return self._queue(Prescription.APPROVED)

    @extend_schema(responses={200: PrescriptionDetailSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def rejected(self, request):
        return self._queue(Prescription.REJECTED)
