from rest_framework import serializers

from patients.serializers import PatientSummarySerializer
from .models import Payment


class PaymentCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()
    appointmentId = serializers.IntegerField(required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Payment.STATUS_CHOICES, required=False)
    transactionId = serializers.CharField(required=False, allow_blank=True)


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Payment.STATUS_CHOICES)


class PaymentSerializer(serializers.ModelSerializer):
    patientId = serializers.IntegerField(source='patient_id', read_only=True)
    appointmentId = serializers.IntegerField(source='appointment_id', read_only=True)
    transactionId = serializers.CharField(source='transaction_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Payment
        fields = ['id', 'patientId', 'appointmentId', 'amount', 'status', 'method',
                  'transactionId', 'date', 'createdAt']
        read_only_fields = fields


class PaymentDetailSerializer(PaymentSerializer):
    patient = PatientSummarySerializer(read_only=True)

    class Meta(PaymentSerializer.Meta):
        fields = PaymentSerializer.Meta.fields + ['patient']
        read_only_fields = fields
