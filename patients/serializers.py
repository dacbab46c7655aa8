from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from appointments.models import Appointment
from doctors.serializers import DoctorSummarySerializer
from .models import Patient, MedicalRecord, LabReport

User = get_user_model()


class MedicalHistoryItemValidator(serializers.Serializer):
    condition = serializers.CharField(required=True)
    date = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class EmergencyContactValidator(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    relationship = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)


class PatientSummarySerializer(serializers.ModelSerializer):
    """Patient block nested inside appointment/prescription payloads."""
    user = UserSummarySerializer(read_only=True)
    bloodGroup = serializers.CharField(source='blood_group', read_only=True)

    class Meta:
        model = Patient
        fields = ['id', 'user', 'age', 'gender', 'bloodGroup', 'phone']


class PatientSerializer(serializers.ModelSerializer):
    """
    Full patient profile.
    Validates the structure of the medical history and emergency contact JSON.
    """
    user = UserSummarySerializer(read_only=True)
    bloodGroup = serializers.CharField(source='blood_group', required=False, allow_blank=True)
    medicalHistory = serializers.JSONField(source='medical_history', required=False)
    emergencyContact = serializers.JSONField(source='emergency_contact', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Patient
        fields = ['id', 'user', 'age', 'gender', 'bloodGroup', 'phone', 'address',
                  'medicalHistory', 'emergencyContact', 'status', 'createdAt']
        read_only_fields = ['id', 'createdAt']

    def validate_medicalHistory(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('medical history must be a list')
        validator = MedicalHistoryItemValidator(data=value, many=True)
        if not validator.is_valid():
            raise serializers.ValidationError(validator.errors)
        return value

    def validate_emergencyContact(self, value):
        validator = EmergencyContactValidator(data=value)
        if not validator.is_valid():
            raise serializers.ValidationError(validator.errors)
        return value


class PatientCreateSerializer(PatientSerializer):
    """
    Admin-side creation of a profile for an existing Patient user.
    """
    userId = serializers.IntegerField(write_only=True)

    class Meta(PatientSerializer.Meta):
        fields = PatientSerializer.Meta.fields + ['userId']

    def validate_userId(self, value):
        try:
            user = User.objects.get(pk=value)
        except User.DoesNotExist:
            raise serializers.ValidationError('user does not exist!')
        if user.role != User.PATIENT:
            raise serializers.ValidationError('User role must be Patient')
        if Patient.objects.filter(user=user).exists():
            raise serializers.ValidationError('patient profile already exists for this user')
        return value

    def create(self, validated_data):
        validated_data['user_id'] = validated_data.pop('userId')
        return super().create(validated_data)


class MedicalRecordSerializer(serializers.ModelSerializer):
    doctor = DoctorSummarySerializer(read_only=True)
    patientId = serializers.PrimaryKeyRelatedField(source='patient', queryset=Patient.objects.all())
    appointmentId = serializers.PrimaryKeyRelatedField(
        source='appointment', queryset=Appointment.objects.all(), required=False, allow_null=True
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = MedicalRecord
        fields = ['id', 'patientId', 'doctor', 'appointmentId', 'diagnosis',
                  'treatment', 'notes', 'date', 'createdAt']
        read_only_fields = ['id', 'date', 'createdAt']


class LabReportSerializer(serializers.ModelSerializer):
    doctor = DoctorSummarySerializer(read_only=True)
    patientId = serializers.PrimaryKeyRelatedField(source='patient', queryset=Patient.objects.all())
    testName = serializers.CharField(source='test_name')
    fileUrl = serializers.URLField(source='file_url', required=False, allow_blank=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = LabReport
        fields = ['id', 'patientId', 'doctor', 'testName', 'results', 'status',
                  'fileUrl', 'date', 'createdAt']
        read_only_fields = ['id', 'status', 'date', 'createdAt']


class LabResultSerializer(serializers.Serializer):
    results = serializers.CharField()
    fileUrl = serializers.URLField(source='file_url', required=False, allow_blank=True)
