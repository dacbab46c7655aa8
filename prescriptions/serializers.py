from rest_framework import serializers

from doctors.serializers import DoctorSummarySerializer
from patients.serializers import PatientSummarySerializer
from .models import Prescription


class MedicineSerializer(serializers.Serializer):
    name = serializers.CharField()
    dosage = serializers.CharField()
    frequency = serializers.CharField(required=False, allow_blank=True)
    duration = serializers.CharField()
    instructions = serializers.CharField(required=False, allow_blank=True)


class PrescriptionCreateSerializer(serializers.Serializer):
    appointmentId = serializers.IntegerField()
    patientId = serializers.IntegerField(required=False, allow_null=True)
    diagnosis = serializers.CharField(required=False, allow_blank=True, default='')
    medicines = MedicineSerializer(many=True, required=False, default=list)
    instructions = serializers.CharField(required=False, allow_blank=True, default='')


class PrescriptionUpdateSerializer(serializers.Serializer):
    diagnosis = serializers.CharField(required=False, allow_blank=True)
    medicines = MedicineSerializer(many=True, required=False)
    instructions = serializers.CharField(required=False, allow_blank=True)


class PharmacyDecisionSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)
    rejectionReason = serializers.CharField(required=False, allow_blank=True)

    def note_text(self):
        data = self.validated_data
        return data.get('notes') or data.get('rejectionReason')


class PrescriptionSerializer(serializers.ModelSerializer):
    patientId = serializers.IntegerField(source='patient_id', read_only=True)
    doctorId = serializers.IntegerField(source='doctor_id', read_only=True)
    appointmentId = serializers.IntegerField(source='appointment_id', read_only=True)
    pharmacyNotes = serializers.CharField(source='pharmacy_notes', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Prescription
        fields = ['id', 'patientId', 'doctorId', 'appointmentId', 'diagnosis', 'medicines',
                  'instructions', 'status', 'pharmacyNotes', 'createdAt', 'updatedAt']
        read_only_fields = fields


class PrescriptionDetailSerializer(PrescriptionSerializer):
    patient = PatientSummarySerializer(read_only=True)
    doctor = DoctorSummarySerializer(read_only=True)

    class Meta(PrescriptionSerializer.Meta):
        fields = PrescriptionSerializer.Meta.fields + ['patient', 'doctor']
        read_only_fields = fields
