import pytest
from rest_framework.test import APIClient

from accounts.models import Pharmacist, User
from appointments.models import Appointment
from doctors.models import Department, Doctor
from patients.models import Patient


def make_user(role, email, name=None, **extra):
    return User.objects.create_user(
        username=email, email=email, password='secret123',
        name=name or email.split('@')[0].title(), role=role, **extra
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    """Returns an APIClient authenticated as the given user."""
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def admin(db):
    return make_user(User.ADMIN, 'admin@hospital.test', 'Admin', is_staff=True)


@pytest.fixture
def department(db):
    return Department.objects.create(name='Cardiology', description='Heart')


@pytest.fixture
def doctor(db, department):
    return Doctor.objects.create(
        user=make_user(User.DOCTOR, 'house@hospital.test', 'Gregory House'),
        specialization='Cardiologist', fee=500, department=department,
    )


@pytest.fixture
def other_doctor(db):
    return Doctor.objects.create(
        user=make_user(User.DOCTOR, 'wilson@hospital.test', 'James Wilson'),
        specialization='Oncologist', fee=700,
    )


@pytest.fixture
def patient(db):
    return Patient.objects.create(user=make_user(User.PATIENT, 'jane@example.com', 'Jane Doe'), age=34)


@pytest.fixture
def other_patient(db):
    return Patient.objects.create(user=make_user(User.PATIENT, 'john@example.com', 'John Roe'), age=51)


@pytest.fixture
def pharmacist(db):
    return Pharmacist.objects.create(
        user=make_user(User.PHARMACIST, 'pharma@hospital.test', 'Pat Pharma'),
        license_number='PH-1001',
    )


@pytest.fixture
def appointment(doctor, patient):
    return Appointment.objects.create(patient=patient, doctor=doctor, time='10:00')
