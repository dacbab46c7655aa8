from django.db import transaction
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from doctors.models import Doctor, Department
from patients.models import Patient
from .models import User, Pharmacist
from .permissions import doctor_profile, patient_profile, pharmacist_profile


class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user block nested inside patient/doctor payloads."""
    class Meta:
        model = User
        fields = ['id', 'name', 'email']


class UserSerializer(serializers.ModelSerializer):
    isOnline = serializers.BooleanField(source='is_online', read_only=True)
    lastLogin = serializers.DateTimeField(source='last_login', read_only=True)
    dateJoined = serializers.DateTimeField(source='date_joined', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'isOnline', 'lastLogin', 'dateJoined']
        read_only_fields = ['id']


def user_payload(user):
    """
    User info returned on login/register, with the ids of the role profiles
    so the frontend can call /doctor/<id>/ and /patient/<id>/ routes.
    """
    doctor = doctor_profile(user)
    patient = patient_profile(user)
    pharmacist = pharmacist_profile(user)
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'role': user.role,
        'doctorId': doctor.id if doctor else None,
        'patientId': patient.id if patient else None,
        'pharmacistId': pharmacist.id if pharmacist else None,
    }


class RegisterSerializer(serializers.Serializer):
    """
    Creates a user together with the profile matching its role.
    """
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)
    # admins are created through the admin site or createsuperuser
    role = serializers.ChoiceField(choices=(User.DOCTOR, User.PATIENT, User.PHARMACIST), default=User.PATIENT)

    # doctor profile
    specialization = serializers.CharField(required=False, default='General')
    department = serializers.IntegerField(required=False, allow_null=True)
    fee = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=500)

    # pharmacist profile
    licenseNumber = serializers.CharField(source='license_number', required=False)
    phone = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('User already exists')
        return value.lower()

    def validate(self, data):
        if data['role'] == User.PHARMACIST and not data.get('license_number'):
            raise serializers.ValidationError({'licenseNumber': 'This field is required for pharmacists.'})
        department_id = data.get('department')
        if department_id:
            try:
                data['department'] = Department.objects.get(pk=department_id)
            except Department.DoesNotExist:
                raise serializers.ValidationError({'department': 'department does not exist!'})
        return data

    @transaction.atomic
    def create(self, validated_data):
        role = validated_data['role']
        user = User.objects.create_user(
            username=validated_data['email'],
            email=validated_data['email'],
            password=validated_data['password'],
            name=validated_data['name'],
            role=role,
        )

        if role == User.DOCTOR:
            Doctor.objects.create(
                user=user,
                specialization=validated_data.get('specialization') or 'General',
                fee=validated_data.get('fee') or 500,
                department=validated_data.get('department'),
            )
        elif role == User.PATIENT:
            Patient.objects.create(user=user)
        elif role == User.PHARMACIST:
            Pharmacist.objects.create(
                user=user,
                license_number=validated_data['license_number'],
                phone=validated_data.get('phone', ''),
            )
        return user


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT serializer that includes user data in the token response.
    """
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['success'] = True
        data['token'] = data['access']
        data['user'] = user_payload(self.user)
        return data


class LogoutSerializer(serializers.Serializer):
    refresh_token = serializers.CharField(required=False, allow_blank=True)


class ProfileSerializer(serializers.ModelSerializer):
    """
    Own profile. Role is writable only for admins (checked in the view).
    """
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role']
        read_only_fields = ['id']


class UserStatusSerializer(serializers.Serializer):
    STATUS_CHOICES = ('Active', 'Inactive', 'Blocked')
    role = serializers.ChoiceField(choices=(User.DOCTOR, User.PATIENT))
    status = serializers.ChoiceField(choices=STATUS_CHOICES)

    def validate(self, data):
        allowed = {User.DOCTOR: ('Active', 'Inactive'), User.PATIENT: ('Active', 'Blocked')}
        if data['status'] not in allowed[data['role']]:
            raise serializers.ValidationError(f"{data['status']} is not a valid {data['role']} status")
        return data


class PharmacistSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    licenseNumber = serializers.CharField(source='license_number', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Pharmacist
        fields = ['id', 'user', 'licenseNumber', 'phone', 'status', 'createdAt']


class PharmacistCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)
    licenseNumber = serializers.CharField(source='license_number')
    phone = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('User already exists')
        return value.lower()

    @transaction.atomic
    def create(self, validated_data):
        user = User.objects.create_user(
            username=validated_data['email'],
            email=validated_data['email'],
            password=validated_data['password'],
            name=validated_data['name'],
            role=User.PHARMACIST,
        )
        return Pharmacist.objects.create(
            user=user,
            license_number=validated_data['license_number'],
            phone=validated_data.get('phone', ''),
        )
