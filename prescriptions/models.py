from django.db import models


class Prescription(models.Model):
    """
    Medicines issued by a doctor for an appointment, adjudicated by the pharmacy.
    """
    PENDING = 'PENDING'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'
    DISPENSED = 'DISPENSED'
    STATUS_CHOICES = (
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
        (DISPENSED, 'Dispensed'),
    )
    patient = models.ForeignKey('patients.Patient', on_delete=models.CASCADE, related_name='prescriptions')
    doctor = models.ForeignKey('doctors.Doctor', on_delete=models.CASCADE, related_name='prescriptions')
    appointment = models.ForeignKey('appointments.Appointment', on_delete=models.CASCADE,
                                    related_name='prescriptions')
    diagnosis = models.CharField(max_length=255, blank=True)
    medicines = models.JSONField(
        default=list,
        help_text="""
        [{"name": "", "dosage": "", "frequency": "", "duration": "", "instructions": ""}]
        """
    )
    instructions = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
    pharmacy_notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Prescription {self.id} ({self.status})"
