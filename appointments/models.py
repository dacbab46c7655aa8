from django.db import models
from django.utils import timezone


class Appointment(models.Model):
    """
    A booking between a patient and a doctor at a given date and time.
    """
    PENDING = 'Pending'
    CONFIRMED = 'Confirmed'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'
    STATUS_CHOICES = (
        (PENDING, 'Pending'),
        (CONFIRMED, 'Confirmed'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    )
    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey('doctors.Doctor', on_delete=models.CASCADE, related_name='appointments')
    date = models.DateField(default=timezone.localdate)
    time = models.CharField(max_length=5, help_text='24-hour HH:MM')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
    is_urgent = models.BooleanField(default=False)
    reason = models.TextField(blank=True)
    consultation_notes = models.TextField(blank=True)
    diagnosis = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Appointment {self.id} - {self.date} {self.time} ({self.status})"
