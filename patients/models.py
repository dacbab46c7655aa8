from django.conf import settings
from django.db import models
from django.utils import timezone


class Patient(models.Model):
    """
    Patient profile owned by exactly one user.
    """
    STATUS_CHOICES = (
        ('Active', 'Active'),
        ('Blocked', 'Blocked'),
    )
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='patient_profile')
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    blood_group = models.CharField(max_length=5, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    medical_history = models.JSONField(
        default=list,
        blank=True,
        help_text="""
        ordered list of past conditions:
        [{"condition": "", "date": "", "notes": ""}]
        """
    )
    emergency_contact = models.JSONField(
        default=dict,
        blank=True,
        help_text='{"name": "", "relationship": "", "phone": ""}'
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='Active')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Patient {self.id} - {self.user.name}"


class MedicalRecord(models.Model):
    """
    A diagnosis/treatment entry written by a doctor for a patient.
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medical_records')
    doctor = models.ForeignKey('doctors.Doctor', on_delete=models.CASCADE, related_name='medical_records')
    appointment = models.ForeignKey('appointments.Appointment', on_delete=models.SET_NULL,
                                    null=True, blank=True, related_name='medical_records')
    diagnosis = models.CharField(max_length=255)
    treatment = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.diagnosis} - Patient {self.patient_id}"


class LabReport(models.Model):
    STATUS_CHOICES = (
        ('Pending', 'Pending'),
        ('Completed', 'Completed'),
    )
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='lab_reports')
    doctor = models.ForeignKey('doctors.Doctor', on_delete=models.CASCADE, related_name='lab_reports')
    test_name = models.CharField(max_length=200)
    results = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='Pending')
    file_url = models.URLField(blank=True)
    date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.test_name} - {self.status}"
