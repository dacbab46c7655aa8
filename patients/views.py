import logging

from drf_spectacular.utils import extend_schema
from rest_framework import generics, views, status, filters
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import (
    IsAdmin, IsAdminOrDoctor, can_view_patient, doctor_profile, is_admin,
)
from doctors.models import Doctor
from HospitalBackend.exceptions import InvalidInput, NotFound, Unauthorized
from HospitalBackend.responses import success, success_list
from notifications.services import notify
from .models import Patient, MedicalRecord, LabReport
from .serializers import (
    LabReportSerializer, LabResultSerializer, MedicalRecordSerializer,
    PatientCreateSerializer, PatientSerializer,
)

logger = logging.getLogger(__name__)


def get_patient_or_404(patient_id):
    try:
        return Patient.objects.select_related('user').get(pk=patient_id)
    except Patient.DoesNotExist:
        raise NotFound('Patient not found')


def ensure_can_view_patient(user, patient):
    if not can_view_patient(user, patient):
        logger.warning(f"User {user.pk} denied access to patient {patient.pk}")
        raise Unauthorized("Not authorized to access this patient's records")


def resolve_author_doctor(request):
    """
    The doctor a record is written by: the caller's own profile,
    or for admins the doctorId given in the payload.
    """
    profile = doctor_profile(request.user)
    if profile is not None:
        return profile
    if not is_admin(request.user):
        raise NotFound('Doctor profile not found')
    doctor_id = request.data.get('doctorId')
    if not doctor_id:
        raise InvalidInput('doctorId is required')
    try:
        return Doctor.objects.get(pk=doctor_id)
    except (Doctor.DoesNotExist, ValueError):
        raise NotFound('Doctor not found')


class PatientListView(generics.ListAPIView):
    """
    Lists patients with search.
    Doctors only see patients they have appointments with.
    """
    serializer_class = PatientSerializer
    permission_classes = [IsAdminOrDoctor]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['user__name', 'user__email', 'phone']
    ordering_fields = ['created_at', 'age']

    def get_queryset(self):
        queryset = Patient.objects.select_related('user')
        user = self.request.user
        if not is_admin(user):
            doctor = doctor_profile(user)
            if doctor is None:
                return Patient.objects.none()
            queryset = queryset.filter(appointments__doctor=doctor).distinct()
        return queryset.order_by('-created_at')

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        return success_list(self.get_serializer(queryset, many=True).data)


class PatientCreateView(generics.CreateAPIView):
    """
    Allows admin users to create a profile for an existing patient user.
    """
    serializer_class = PatientCreateSerializer
    permission_classes = [IsAdmin]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        patient = serializer.save()
        logger.info(f"New patient profile created: {patient.pk} by: {request.user.email}")
        return success(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)


class PatientDetailView(generics.RetrieveUpdateAPIView):
    """
    Retrieve or update a patient.
    Only admins may change the Active/Blocked status.
    """
    queryset = Patient.objects.select_related('user')
    serializer_class = PatientSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        patient = super().get_object()
        ensure_can_view_patient(self.request.user, patient)
        return patient

    def retrieve(self, request, *args, **kwargs):
        return success(self.get_serializer(self.get_object()).data)

    def update(self, request, *args, **kwargs):
        if 'status' in request.data and not is_admin(request.user):
            raise PermissionDenied('only admins can change patient status')
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success(serializer.data)


class PatientByUserView(views.APIView):
    """Resolves the patient profile of a user id."""

    @extend_schema(responses={200: PatientSerializer})
    def get(self, request, user_id):
        try:
            patient = Patient.objects.select_related('user').get(user_id=user_id)
        except Patient.DoesNotExist:
            raise NotFound('Patient not found for this user')
        ensure_can_view_patient(request.user, patient)
        return success(PatientSerializer(patient).data)


class PatientMedicalRecordsView(generics.ListAPIView):
    serializer_class = MedicalRecordSerializer

    def list(self, request, *args, **kwargs):
        patient = get_patient_or_404(self.kwargs['patient_id'])
        ensure_can_view_patient(request.user, patient)
        records = patient.medical_records.select_related('doctor__user').order_by('-date')
        return success_list(self.get_serializer(records, many=True).data)


class MedicalRecordCreateView(generics.CreateAPIView):
    serializer_class = MedicalRecordSerializer
    permission_classes = [IsAdminOrDoctor]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = serializer.save(doctor=resolve_author_doctor(request))
        logger.info(f"Medical record {record.pk} created for patient {record.patient_id}")
        return success(self.get_serializer(record).data, status=status.HTTP_201_CREATED)


class PatientLabReportsView(generics.ListAPIView):
    serializer_class = LabReportSerializer

    def list(self, request, *args, **kwargs):
        patient = get_patient_or_404(self.kwargs['patient_id'])
        ensure_can_view_patient(request.user, patient)
        reports = patient.lab_reports.select_related('doctor__user').order_by('-date')
        return success_list(self.get_serializer(reports, many=True).data)


class LabReportCreateView(generics.CreateAPIView):
    serializer_class = LabReportSerializer
    permission_classes = [IsAdminOrDoctor]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = serializer.save(doctor=resolve_author_doctor(request))
        logger.info(f"Lab report {report.pk} ordered for patient {report.patient_id}")
        return success(self.get_serializer(report).data, status=status.HTTP_201_CREATED)


class LabReportResultView(views.APIView):
    """
    Records the results of a lab test, marks it Completed
    and notifies the patient.
    """
    permission_classes = [IsAdminOrDoctor]

    @extend_schema(request=LabResultSerializer, responses={200: LabReportSerializer})
    def patch(self, request, pk):
        try:
            report = LabReport.objects.select_related('patient__user', 'doctor__user').get(pk=pk)
        except LabReport.DoesNotExist:
            raise NotFound('Lab report not found')

        if not is_admin(request.user) and report.doctor != doctor_profile(request.user):
            raise Unauthorized('Only the ordering doctor can record results')

        serializer = LabResultSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report.results = serializer.validated_data['results']
        report.file_url = serializer.validated_data.get('file_url', report.file_url)
        report.status = 'Completed'
        report.save(update_fields=['results', 'file_url', 'status'])

        notify(
            report.patient.user,
            title='Lab results available',
            message=f"Your {report.test_name} results are ready.",
            type='LabResult',
        )
        logger.info(f"Lab report {report.pk} completed by {request.user.email}")
        return success(LabReportSerializer(report).data)
