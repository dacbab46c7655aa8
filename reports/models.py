from django.db import models


class ReportGeneration(models.Model):
    """
    An Excel export requested by an admin and built in the background.
    """
    REPORT_TYPE_CHOICES = (
        ('appointment_summary', 'Appointment Summary'),
        ('revenue', 'Revenue'),
        ('prescription_activity', 'Prescription Activity'),
    )
    STATUS_CHOICES = (
        ('processing', 'Processing'),
        ('ready', 'Ready'),
        ('failed', 'Failed'),
    )
    generated_by = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='reports')
    report_type = models.CharField(max_length=30, choices=REPORT_TYPE_CHOICES)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='processing')
    error = models.TextField(blank=True)
    file_path = models.FileField(upload_to='reports/', null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.report_type} - {self.created_at}"
