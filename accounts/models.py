from django.db import models
from django.contrib.auth.models import AbstractUser, UserManager


class HospitalUserManager(UserManager):
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', 'Admin')
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom user model with role-based access.
    Logs in with email; username is kept for the Django admin.
    """
    ADMIN = 'Admin'
    DOCTOR = 'Doctor'
    PATIENT = 'Patient'
    PHARMACIST = 'Pharmacist'
    ROLE_CHOICES = (
        (ADMIN, 'Admin'),
        (DOCTOR, 'Doctor'),
        (PATIENT, 'Patient'),
        (PHARMACIST, 'Pharmacist'),
    )
    name = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=PATIENT)
    is_online = models.BooleanField(default=False)

    objects = HospitalUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self):
        return f"{self.email} - ({self.role})"


class Pharmacist(models.Model):
    """
    Pharmacy staff profile, one per pharmacist user.
    """
    STATUS_CHOICES = (
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
    )
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='pharmacist_profile')
    license_number = models.CharField(max_length=100)
    phone = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='Active')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user.name} ({self.license_number})"
