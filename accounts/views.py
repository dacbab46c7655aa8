import logging

from django.contrib.auth import get_user_model
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiTypes
from rest_framework import generics, permissions, status, views
from rest_framework.exceptions import PermissionDenied
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from HospitalBackend.exceptions import InvalidInput, NotFound
from HospitalBackend.responses import success, success_list
from doctors.models import Doctor
from patients.models import Patient
from .models import Pharmacist
from .permissions import IsAdmin, doctor_profile, patient_profile
from .serializers import (
    CustomTokenObtainPairSerializer, LogoutSerializer, PharmacistCreateSerializer,
    PharmacistSerializer, ProfileSerializer, RegisterSerializer, UserSerializer,
    UserStatusSerializer, user_payload,
)

logger = logging.getLogger(__name__)
User = get_user_model()


class RegisterView(views.APIView):
    """
    Public registration. Creates the user, its role profile and a JWT pair.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    @extend_schema(request=RegisterSerializer, responses={201: OpenApiTypes.OBJECT})
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        refresh = RefreshToken.for_user(user)
        logger.info(f"New {user.role} registered: {user.email}")
        return success(
            status=status.HTTP_201_CREATED,
            token=str(refresh.access_token),
            refresh=str(refresh),
            user=user_payload(user),
        )


class CustomTokenObtainPairView(TokenObtainPairView):
    """
    JWT login (email + password) that marks the user online
    and records the login time.
    """
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == 200:
            user_id = response.data.get('user', {}).get('id')
            User.objects.filter(pk=user_id).update(is_online=True, last_login=timezone.now())
            logger.info(f"User {user_id} logged in")
        return response


class UserLogoutView(views.APIView):
    """
    Blacklists the refresh token (when given) and marks the user offline.
    """
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=LogoutSerializer, responses={200: OpenApiTypes.OBJECT})
    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        refresh_token = serializer.validated_data.get('refresh_token')

        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                raise InvalidInput(str(e))

        User.objects.filter(pk=request.user.pk).update(is_online=False)
        logger.info(f"User {request.user.pk} logged out")
        return success(message='Logged out successfully')


class UserProfileView(generics.RetrieveUpdateAPIView):
    """
    Retrieves and updates the authenticated user's profile.
    Non-admin users are not allowed to change their role.
    """
    serializer_class = ProfileSerializer
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ['get', 'patch', 'head', 'options']

    def get_object(self):
        return self.request.user

    def retrieve(self, request, *args, **kwargs):
        return success(user_payload(self.get_object()))

    def partial_update(self, request, *args, **kwargs):
        # you can't change your role if you're not an admin
        if 'role' in request.data and request.user.role != User.ADMIN:
            raise PermissionDenied('you do not have permission to change your role')
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return success(user_payload(user))


class UserListView(generics.ListAPIView):
    """Lists every user for the admin user-management screen."""
    serializer_class = UserSerializer
    permission_classes = [IsAdmin]
    filterset_fields = ['role', 'is_online']

    def get_queryset(self):
        return User.objects.all().order_by('id')

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        return success_list(self.get_serializer(queryset, many=True).data)


class ActiveUsersView(views.APIView):
    """
    Currently online users grouped by role, most recent login first.
    """
    permission_classes = [IsAdmin]

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        online = User.objects.filter(is_online=True).select_related(
            'doctor_profile__department', 'patient_profile'
        ).order_by('-last_login')

        doctors, patients, admins = [], [], []
        for user in online:
            data = UserSerializer(user).data
            if user.role == User.DOCTOR:
                profile = doctor_profile(user)
                data['profile'] = {
                    'specialization': profile.specialization,
                    'department': profile.department.name if profile.department else None,
                } if profile else None
                doctors.append(data)
            elif user.role == User.PATIENT:
                profile = patient_profile(user)
                data['profile'] = {
                    'bloodGroup': profile.blood_group,
                    'gender': profile.gender,
                    'age': profile.age,
                } if profile else None
                patients.append(data)
            elif user.role == User.ADMIN:
                admins.append(data)

        return success({
            'total': len(online),
            'doctors': doctors,
            'patients': patients,
            'admins': admins,
            'doctorCount': len(doctors),
            'patientCount': len(patients),
        })


class UserStatusView(views.APIView):
    """
    Sets the status of a doctor or patient profile (e.g. block a patient).
    """
    permission_classes = [IsAdmin]

    @extend_schema(request=UserStatusSerializer, responses={200: OpenApiTypes.OBJECT})
    def patch(self, request, user_id):
        serializer = UserStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        model = Doctor if data['role'] == User.DOCTOR else Patient
        updated = model.objects.filter(user_id=user_id).update(status=data['status'])
        if not updated:
            raise NotFound(f"{data['role']} profile not found for this user")

        logger.info(f"{data['role']} profile of user {user_id} set to {data['status']} by {request.user.email}")
        return success(message='Status updated successfully')


class PharmacistListCreateView(generics.ListCreateAPIView):
    permission_classes = [IsAdmin]
    serializer_class = PharmacistSerializer

    def get_queryset(self):
        return Pharmacist.objects.select_related('user').order_by('-created_at')

    def list(self, request, *args, **kwargs):
        return success_list(self.get_serializer(self.get_queryset(), many=True).data)

    @extend_schema(request=PharmacistCreateSerializer, responses={201: PharmacistSerializer})
    def create(self, request, *args, **kwargs):
        serializer = PharmacistCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pharmacist = serializer.save()
        logger.info(f"Pharmacist {pharmacist.user.email} created by {request.user.email}")
        return success(PharmacistSerializer(pharmacist).data, status=status.HTTP_201_CREATED)


class PharmacistDeleteView(views.APIView):
    """Deletes the pharmacist profile together with its user account."""
    permission_classes = [IsAdmin]

    def delete(self, request, pk):
        try:
            pharmacist = Pharmacist.objects.select_related('user').get(pk=pk)
        except Pharmacist.DoesNotExist:
            raise NotFound('Pharmacist not found')

        # cascades to the profile
        pharmacist.user.delete()
        logger.info(f"Pharmacist {pk} deleted by {request.user.email}")
        return success(message='Pharmacist deleted successfully')


class PharmacistByUserView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: PharmacistSerializer})
    def get(self, request, user_id):
        try:
            pharmacist = Pharmacist.objects.select_related('user').get(user_id=user_id)
        except Pharmacist.DoesNotExist:
            raise NotFound('Pharmacist not found')
        return success(PharmacistSerializer(pharmacist).data)
