from rest_framework import serializers
from .models import ReportGeneration


class ReportGenerationSerializer(serializers.ModelSerializer):
    generatedBy = serializers.IntegerField(source='generated_by_id', read_only=True)
    reportType = serializers.CharField(source='report_type', read_only=True)
    startDate = serializers.DateField(source='start_date', read_only=True)
    endDate = serializers.DateField(source='end_date', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    downloadUrl = serializers.SerializerMethodField()

    class Meta:
        model = ReportGeneration
        fields = ['id', 'generatedBy', 'reportType', 'startDate', 'endDate', 'status',
                  'error', 'createdAt', 'downloadUrl']

    def get_downloadUrl(self, obj):
        if obj.status != 'ready':
            return None
        return f"/api/admin/reports/{obj.id}/download/"


class ReportRequestSerializer(serializers.Serializer):
    """
    Validates report generation requests.
    """
    report_type = serializers.ChoiceField(choices=ReportGeneration.REPORT_TYPE_CHOICES)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, data):
        start = data.get('start_date')
        end = data.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError("Start date cannot be after end date.")
        return data
