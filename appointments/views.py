import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action

from accounts.models import User
from accounts.permissions import (
    IsAdminOrDoctorOrPatient, can_view_doctor, can_view_patient, doctor_profile, is_admin, patient_profile,
)
from doctors.models import Doctor
from HospitalBackend.exceptions import NotFound, Unauthorized
from HospitalBackend.responses import success, success_list
from patients.models import Patient
from .models import Appointment
from .serializers import (
    AppointmentCreateSerializer, AppointmentDetailSerializer, AppointmentSerializer, AppointmentUpdateSerializer,
)
from .workflow import AppointmentWorkflow

logger = logging.getLogger(__name__)


def is_party(user, appointment):
    """True for admins and for the doctor or patient of the appointment."""
    if is_admin(user):
        return True
    doctor = doctor_profile(user)
    if doctor is not None and appointment.doctor_id == doctor.pk:
        return True
    patient = patient_profile(user)
    return patient is not None and appointment.patient_id == patient.pk


class AppointmentViewSet(viewsets.ViewSet):
    """
    Appointment booking and status management.
    Lists are scoped by role: admins see everything, doctors and patients their own.
    """
    permission_classes = [IsAdminOrDoctorOrPatient]
    workflow_class = AppointmentWorkflow
    lookup_value_regex = r'\d+'

    def get_workflow(self):
        return self.workflow_class()

    def get_queryset(self):
        user = self.request.user
        queryset = Appointment.objects.select_related('patient__user', 'doctor__user')
        if is_admin(user):
            return queryset
        if user.role == User.DOCTOR:
            doctor = doctor_profile(user)
            return queryset.filter(doctor=doctor) if doctor else queryset.none()
        patient = patient_profile(user)
        return queryset.filter(patient=patient) if patient else queryset.none()

    @extend_schema(responses={200: AppointmentDetailSerializer(many=True)})
    def list(self, request):
        queryset = self.get_queryset()
        filter_status = request.query_params.get('status')
        if filter_status:
            queryset = queryset.filter(status=filter_status)
        if request.query_params.get('urgent') in ('true', '1'):
            queryset = queryset.filter(is_urgent=True)
        queryset = queryset.order_by('-date', '-time')
        return success_list(AppointmentDetailSerializer(queryset, many=True).data)

    @extend_schema(request=AppointmentCreateSerializer, responses={201: AppointmentSerializer})
    def create(self, request):
        serializer = AppointmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if request.user.role == User.PATIENT:
            own = patient_profile(request.user)
            if own is None or own.pk != data['patientId']:
                raise Unauthorized('Patients can only book appointments for themselves')

        appointment = self.get_workflow().create(
            patient_id=data['patientId'],
            doctor_id=data['doctorId'],
            time=data['time'],
            date=data.get('date'),
            is_urgent=data['isUrgent'],
            reason=data['reason'],
            status=data.get('status'),
        )
        return success(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: AppointmentDetailSerializer})
    def retrieve(self, request, pk=None):
        appointment = self.get_workflow().get(pk)
        if not is_party(request.user, appointment):
            raise Unauthorized('Not authorized to view this appointment')
        return success(AppointmentDetailSerializer(appointment).data)

    @extend_schema(request=AppointmentUpdateSerializer, responses={200: AppointmentSerializer})
    def partial_update(self, request, pk=None):
        workflow = self.get_workflow()
        appointment = workflow.get(pk)
        if not is_party(request.user, appointment):
            raise Unauthorized('Not authorized to update this appointment')

        serializer = AppointmentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        # patients may only cancel their own booking
        if request.user.role == User.PATIENT:
            if set(data) - {'status'} or data.get('status') not in (None, Appointment.CANCELLED):
                raise Unauthorized('Patients can only cancel their appointments')

        appointment = workflow.update(
            appointment,
            status=data.get('status'),
            consultation_notes=data.get('consultationNotes'),
            diagnosis=data.get('diagnosis'),
        )
        return success(AppointmentSerializer(appointment).data)

    def destroy(self, request, pk=None):
        workflow = self.get_workflow()
        appointment = workflow.get(pk)
        if not is_admin(request.user):
            doctor = doctor_profile(request.user)
            if doctor is None or appointment.doctor_id != doctor.pk:
                raise Unauthorized('Not authorized to delete this appointment')
        workflow.delete(appointment)
        return success(message='Appointment deleted')

    @extend_schema(responses={200: AppointmentDetailSerializer(many=True)})
    @action(detail=False, methods=['get'], url_path=r'doctor/(?P<doctor_id>\d+)')
    def by_doctor(self, request, doctor_id=None):
        """A doctor's schedule, earliest first."""
        try:
            doctor = Doctor.objects.get(pk=doctor_id)
        except Doctor.DoesNotExist:
            raise NotFound('Doctor not found')
        if not can_view_doctor(request.user, doctor):
            raise Unauthorized("Not authorized to view this doctor's appointments")
        queryset = Appointment.objects.select_related('patient__user', 'doctor__user') \
            .filter(doctor=doctor).order_by('date', 'time')
        return success_list(AppointmentDetailSerializer(queryset, many=True).data)

    @extend_schema(responses={200: AppointmentDetailSerializer(many=True)})
    @action(detail=False, methods=['get'], url_path=r'patient/(?P<patient_id>\d+)')
    def by_patient(self, request, patient_id=None):
        """A patient's history, latest first."""
        try:
            patient = Patient.objects.get(pk=patient_id)
        except Patient.DoesNotExist:
            raise NotFound('Patient not found')
        if not can_view_patient(request.user, patient):
            raise Unauthorized("Not authorized to view this patient's appointments")
        queryset = Appointment.objects.select_related('patient__user', 'doctor__user') \
            .filter(patient=patient).order_by('-date', '-time')
        return success_list(AppointmentDetailSerializer(queryset, many=True).data)
