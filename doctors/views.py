import logging

from django.db.models import Count
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiTypes
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated

from accounts.permissions import IsAdmin
from HospitalBackend.exceptions import NotFound
from HospitalBackend.responses import EnvelopeMixin, success
from .models import Department, Doctor
from .seeding import seed_departments
from .serializers import DepartmentSerializer, DoctorCreateSerializer, DoctorSerializer

logger = logging.getLogger(__name__)


class DoctorViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    """
    Doctor directory.
    Anyone can browse; only admins create, update or delete profiles.
    """
    serializer_class = DoctorSerializer
    lookup_value_regex = r'\d+'
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    search_fields = ['user__name', 'specialization']
    filterset_fields = ['department', 'available', 'status', 'specialization']

    def get_permissions(self):
        if self.action in ['create', 'destroy', 'update', 'partial_update']:
            permission_classes = [IsAdmin]
        elif self.action == 'by_user':
            permission_classes = [IsAuthenticated]
        else:
            permission_classes = [AllowAny]
        return [permission() for permission in permission_classes]

    def get_serializer_class(self):
        if self.action == 'create':
            return DoctorCreateSerializer
        return DoctorSerializer

    def get_queryset(self):
        return Doctor.objects.select_related('user', 'department').order_by('id')

    def perform_create(self, serializer):
        doctor = serializer.save()
        logger.info(f"Doctor profile {doctor.pk} created by {self.request.user.email}")

    def perform_destroy(self, instance):
        logger.info(f"Doctor profile {instance.pk} deleted by {self.request.user.email}")
        instance.delete()

    @extend_schema(responses={200: DoctorSerializer})
    @action(detail=False, methods=['get'], url_path=r'by-user/(?P<user_id>\d+)')
    def by_user(self, request, user_id=None):
        try:
            doctor = self.get_queryset().get(user_id=user_id)
        except Doctor.DoesNotExist:
            raise NotFound('Doctor not found for this user')
        return success(DoctorSerializer(doctor).data)


class DepartmentViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    """
    Departments with their doctor counts.
    Listing and seeding are public; changes are admin-only.
    """
    serializer_class = DepartmentSerializer
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        if self.action in ['list', 'retrieve', 'seed']:
            permission_classes = [AllowAny]
        else:
            permission_classes = [IsAdmin]
        return [permission() for permission in permission_classes]

    def get_queryset(self):
        return Department.objects.select_related('head__user').annotate(
            doctor_count=Count('doctors')
        ).order_by('name')

    def perform_create(self, serializer):
        department = serializer.save()
        logger.info(f"Department {department.name} created by {self.request.user.email}")

    def perform_destroy(self, instance):
        logger.info(f"Department {instance.name} deleted by {self.request.user.email}")
        instance.delete()

    @extend_schema(request=None, responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=['post'], authentication_classes=[])
    def seed(self, request):
        # duplicates are skipped, so this never fails on repeated calls
        result = seed_departments()
        return success(
            inserted=result['inserted'],
            total=result['total'],
            message=f"{result['inserted']} department(s) added, {result['total']} total",
        )
