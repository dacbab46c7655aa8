from rest_framework import serializers

from doctors.serializers import DoctorSummarySerializer
from patients.serializers import PatientSummarySerializer
from .models import Appointment
from .workflow import normalize_time


def validate_time_string(value):
    try:
        return normalize_time(value)
    except ValueError as e:
        raise serializers.ValidationError(str(e))


class AppointmentCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()
    doctorId = serializers.IntegerField()
    date = serializers.DateField(required=False)
    time = serializers.CharField()
    isUrgent = serializers.BooleanField(required=False, default=False)
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False)

    def validate_time(self, value):
        return validate_time_string(value)


class AppointmentUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False)
    consultationNotes = serializers.CharField(required=False, allow_blank=True)
    diagnosis = serializers.CharField(required=False, allow_blank=True)


class AppointmentSerializer(serializers.ModelSerializer):
    """Appointment with patient and doctor as bare ids."""
    patientId = serializers.IntegerField(source='patient_id', read_only=True)
    doctorId = serializers.IntegerField(source='doctor_id', read_only=True)
    isUrgent = serializers.BooleanField(source='is_urgent', read_only=True)
    consultationNotes = serializers.CharField(source='consultation_notes', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Appointment
        fields = ['id', 'patientId', 'doctorId', 'date', 'time', 'status', 'isUrgent',
                  'reason', 'consultationNotes', 'diagnosis', 'createdAt', 'updatedAt']
        read_only_fields = fields


class AppointmentDetailSerializer(AppointmentSerializer):
    """Appointment with patient and doctor populated, as used by the list endpoints."""
    patient = PatientSummarySerializer(read_only=True)
    doctor = DoctorSummarySerializer(read_only=True)

    class Meta(AppointmentSerializer.Meta):
        fields = AppointmentSerializer.Meta.fields + ['patient', 'doctor']
        read_only_fields = fields
