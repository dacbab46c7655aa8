from django.conf import settings
from django.db import models


class Department(models.Model):
    STATUS_CHOICES = (
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
    )
    name = models.CharField(max_length=150, unique=True)
    description = models.TextField(blank=True)
    head = models.ForeignKey('doctors.Doctor', on_delete=models.SET_NULL, null=True, blank=True,
                             related_name='headed_departments')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='Active')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class Doctor(models.Model):
    """
    Doctor profile owned by exactly one user, optionally attached to a department.
    """
    STATUS_CHOICES = (
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
    )
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='doctor_profile')
    specialization = models.CharField(max_length=150)
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='doctors')
    fee = models.DecimalField(max_digits=10, decimal_places=2)
    available = models.BooleanField(default=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='Active')
    schedule = models.JSONField(
        default=dict,
        blank=True,
        help_text='{"monday": {"start": "09:00", "end": "17:00"}, ...}'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Dr. {self.user.name} ({self.specialization})"
