import pytest
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import Pharmacist, User
from doctors.models import Doctor
from patients.models import Patient
from conftest import make_user

pytestmark = pytest.mark.django_db


def test_register_patient_creates_profile(api_client):
    response = api_client.post('/api/auth/register/', {
        'name': 'Ada Lovelace', 'email': 'Ada@Example.com', 'password': 'secret123',
    }, format='json')

    assert response.status_code == 201
    assert response.data['success'] is True
    assert response.data['token']
    user = User.objects.get(email='ada@example.com')
    assert user.role == User.PATIENT
    assert response.data['user']['patientId'] == Patient.objects.get(user=user).pk


def test_register_doctor_uses_defaults(api_client, department):
    response = api_client.post('/api/auth/register/', {
        'name': 'Dr Strange', 'email': 'strange@hospital.test', 'password': 'secret123',
        'role': 'Doctor', 'department': department.pk,
    }, format='json')

    assert response.status_code == 201
    doctor = Doctor.objects.get(user__email='strange@hospital.test')
    assert doctor.specialization == 'General'
    assert doctor.fee == 500
    assert doctor.department == department


def test_register_duplicate_email(api_client, patient):
    response = api_client.post('/api/auth/register/', {
        'name': 'Jane Again', 'email': 'jane@example.com', 'password': 'secret123',
    }, format='json')

    assert response.status_code == 400
    assert response.data['success'] is False
    assert 'User already exists' in response.data['message']


def test_register_pharmacist_requires_license(api_client):
    response = api_client.post('/api/auth/register/', {
        'name': 'No License', 'email': 'nolicense@hospital.test', 'password': 'secret123',
        'role': 'Pharmacist',
    }, format='json')

    assert response.status_code == 400
    assert not User.objects.filter(email='nolicense@hospital.test').exists()


def test_register_cannot_self_assign_admin(api_client):
    response = api_client.post('/api/auth/register/', {
        'name': 'Mallory', 'email': 'mallory@example.com', 'password': 'secret123', 'role': 'Admin',
    }, format='json')

    assert response.status_code == 400
    assert not User.objects.filter(email='mallory@example.com').exists()


def test_registered_user_cannot_read_admin_analytics(api_client):
    response = api_client.post('/api/auth/register/', {
        'name': 'Plain Patient', 'email': 'plain@example.com', 'password': 'secret123',
    }, format='json')
    user = User.objects.get(email='plain@example.com')
    assert user.is_staff is False

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['token']}")
    assert api_client.get('/api/admin/analytics/').status_code == 403


def test_createsuperuser_gets_admin_role():
    user = User.objects.create_superuser(username='root', email='root@hospital.test', password='secret123')
    assert user.role == User.ADMIN
    assert user.is_staff is True


def test_login_returns_token_and_profile_ids(api_client, doctor):
    response = api_client.post('/api/auth/login/', {
        'email': 'house@hospital.test', 'password': 'secret123',
    }, format='json')

    assert response.status_code == 200
    assert response.data['success'] is True
    assert response.data['token'] == response.data['access']
    assert response.data['user']['doctorId'] == doctor.pk
    doctor.user.refresh_from_db()
    assert doctor.user.is_online is True
    assert doctor.user.last_login is not None


def test_login_wrong_password(api_client, doctor):
    response = api_client.post('/api/auth/login/', {
        'email': 'house@hospital.test', 'password': 'wrong',
    }, format='json')

    assert response.status_code == 401
    assert response.data['success'] is False


def test_logout_blacklists_refresh_token(client_for, patient):
    user = patient.user
    User.objects.filter(pk=user.pk).update(is_online=True)
    refresh = RefreshToken.for_user(user)

    response = client_for(user).post('/api/auth/logout/', {'refresh_token': str(refresh)}, format='json')

    assert response.status_code == 200
    user.refresh_from_db()
    assert user.is_online is False
    second = client_for(user).post('/api/auth/logout/', {'refresh_token': str(refresh)}, format='json')
    assert second.status_code == 400


def test_unauthenticated_request_is_rejected(api_client):
    response = api_client.get('/api/auth/profile/')
    assert response.status_code == 401
    assert response.data['success'] is False


def test_non_admin_cannot_change_role(client_for, patient):
    response = client_for(patient.user).patch('/api/auth/profile/', {'role': 'Admin'}, format='json')
    assert response.status_code == 403
    patient.user.refresh_from_db()
    assert patient.user.role == User.PATIENT


def test_profile_update(client_for, patient):
    response = client_for(patient.user).patch('/api/auth/profile/', {'name': 'Jane Smith'}, format='json')
    assert response.status_code == 200
    assert response.data['data']['name'] == 'Jane Smith'


def test_user_list_is_admin_only(client_for, admin, patient):
    assert client_for(patient.user).get('/api/admin/users/').status_code == 403

    response = client_for(admin).get('/api/admin/users/')
    assert response.status_code == 200
    assert response.data['count'] == 2


def test_active_users_grouped_by_role(client_for, admin, doctor, patient):
    User.objects.filter(pk__in=[doctor.user.pk, patient.user.pk]).update(is_online=True)

    response = client_for(admin).get('/api/admin/active-users/')

    data = response.data['data']
    assert data['doctorCount'] == 1
    assert data['patientCount'] == 1
    assert data['doctors'][0]['profile']['department'] == 'Cardiology'


def test_admin_blocks_patient(client_for, admin, patient):
    response = client_for(admin).patch(
        f'/api/admin/users/{patient.user.pk}/status/', {'role': 'Patient', 'status': 'Blocked'}, format='json'
    )
    assert response.status_code == 200
    patient.refresh_from_db()
    assert patient.status == 'Blocked'


def test_status_must_match_role(client_for, admin, doctor):
    response = client_for(admin).patch(
        f'/api/admin/users/{doctor.user.pk}/status/', {'role': 'Doctor', 'status': 'Blocked'}, format='json'
    )
    assert response.status_code == 400


def test_status_for_missing_profile(client_for, admin):
    user = make_user(User.PATIENT, 'noprofile@example.com')
    response = client_for(admin).patch(
        f'/api/admin/users/{user.pk}/status/', {'role': 'Patient', 'status': 'Blocked'}, format='json'
    )
    assert response.status_code == 404


def test_admin_creates_and_deletes_pharmacist(client_for, admin):
    client = client_for(admin)
    response = client.post('/api/admin/pharmacists/', {
        'name': 'Phil', 'email': 'phil@hospital.test', 'password': 'secret123', 'licenseNumber': 'PH-2',
    }, format='json')
    assert response.status_code == 201
    pharmacist_id = response.data['data']['id']

    response = client.delete(f'/api/admin/pharmacists/{pharmacist_id}/')
    assert response.status_code == 200
    assert not Pharmacist.objects.exists()
    assert not User.objects.filter(email='phil@hospital.test').exists()


def test_pharmacist_by_user(client_for, pharmacist):
    response = client_for(pharmacist.user).get(f'/api/admin/pharmacists/by-user/{pharmacist.user.pk}/')
    assert response.status_code == 200
    assert response.data['data']['licenseNumber'] == 'PH-1001'
