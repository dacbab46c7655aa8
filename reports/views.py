import logging
import os

from django.http import FileResponse
from drf_spectacular.utils import extend_schema, OpenApiTypes
from rest_framework import generics, status, views

from accounts.permissions import IsAdmin, can_view_doctor
from appointments.models import Appointment
from appointments.serializers import AppointmentDetailSerializer
from doctors.models import Doctor
from HospitalBackend.exceptions import NotFound, Unauthorized
from HospitalBackend.responses import success, success_list
from .analytics import dashboard_stats, doctor_stats, get_analytics
from .models import ReportGeneration
from .serializers import ReportGenerationSerializer, ReportRequestSerializer
from .tasks import generate_report_task

logger = logging.getLogger(__name__)


def get_report_or_404(report_id):
    try:
        return ReportGeneration.objects.get(id=report_id)
    except ReportGeneration.DoesNotExist:
        raise NotFound('Report not found')


class AnalyticsView(views.APIView):
    """
    Admin dashboard analytics: summary counters and chart series.
    """
    permission_classes = [IsAdmin]

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return success(get_analytics())


class ReportGenerateView(views.APIView):
    """
    Create a new report request.
    The report is generated asynchronously using Celery.
    """
    permission_classes = [IsAdmin]

    @extend_schema(request=ReportRequestSerializer, responses={202: ReportGenerationSerializer})
    def post(self, request):
        serializer = ReportRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        report = ReportGeneration.objects.create(
            generated_by=request.user,
            report_type=data['report_type'],
            start_date=data.get('start_date'),
            end_date=data.get('end_date'),
        )
        generate_report_task.delay(report.id)
        logger.info(f"Report {report.id} ({report.report_type}) queued by {request.user.email}")

        return success(
            ReportGenerationSerializer(report).data,
            status=status.HTTP_202_ACCEPTED,
            message='Report generation started',
        )


class ReportListView(generics.ListAPIView):
    serializer_class = ReportGenerationSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):
        queryset = ReportGeneration.objects.all()
        report_type = self.request.query_params.get('report_type')
        if report_type:
            queryset = queryset.filter(report_type=report_type)
        return queryset.order_by('-created_at')

    def list(self, request, *args, **kwargs):
        return success_list(self.get_serializer(self.get_queryset(), many=True).data)


class ReportStatusView(views.APIView):
    """
    Check report generation status.
    Used by frontend polling.
    """
    permission_classes = [IsAdmin]

    @extend_schema(responses={200: ReportGenerationSerializer})
    def get(self, request, report_id):
        return success(ReportGenerationSerializer(get_report_or_404(report_id)).data)


class ReportDownloadView(views.APIView):
    """
    Streams a generated report file.
    """
    permission_classes = [IsAdmin]

    @extend_schema(responses={(200, 'application/octet-stream'): OpenApiTypes.BINARY})
    def get(self, request, report_id):
        report = get_report_or_404(report_id)
        if not report.file_path or not os.path.exists(report.file_path.path):
            raise NotFound('File not ready or missing')

        response = FileResponse(open(report.file_path.path, 'rb'))
        filename = os.path.basename(report.file_path.name)
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response


class DashboardStatsView(views.APIView):

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return success(dashboard_stats())


class RecentActivityView(views.APIView):
    """The five most recently booked appointments."""

    @extend_schema(responses={200: AppointmentDetailSerializer(many=True)})
    def get(self, request):
        appointments = Appointment.objects.select_related('patient__user', 'doctor__user') \
            .order_by('-created_at')[:5]
        return success(AppointmentDetailSerializer(appointments, many=True).data)


class DoctorDashboardView(views.APIView):

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request, doctor_id):
        try:
            doctor = Doctor.objects.get(pk=doctor_id)
        except Doctor.DoesNotExist:
            raise NotFound('Doctor not found')
        if not can_view_doctor(request.user, doctor):
            raise Unauthorized("Not authorized to view this doctor's dashboard")
        return success(doctor_stats(doctor))
