import pytest

from accounts.models import User
from doctors.models import Department, Doctor
from doctors.seeding import DEPARTMENT_CATALOG, seed_departments
from conftest import make_user

pytestmark = pytest.mark.django_db


class TestDepartmentSeeding:

    def test_seed_is_idempotent(self, api_client):
        first = api_client.post('/api/departments/seed/')
        second = api_client.post('/api/departments/seed/')

        assert first.status_code == 200
        assert first.data['inserted'] == len(DEPARTMENT_CATALOG)
        assert second.status_code == 200
        assert second.data['inserted'] == 0
        assert second.data['total'] == first.data['total'] == Department.objects.count()

    def test_existing_names_are_skipped(self, department):
        result = seed_departments()

        assert result['inserted'] == len(DEPARTMENT_CATALOG) - 1
        assert result['total'] == len(DEPARTMENT_CATALOG)
        assert Department.objects.get(name='Cardiology').description == 'Heart'

    def test_seed_ignores_bad_credentials(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = api_client.post('/api/departments/seed/')
        assert response.status_code == 200
        assert response.data['success'] is True


class TestDepartments:

    def test_public_list_with_doctor_count(self, api_client, doctor):
        Department.objects.create(name='Neurology')

        response = api_client.get('/api/departments/')

        assert response.status_code == 200
        counts = {d['name']: d['doctorCount'] for d in response.data['data']}
        assert counts == {'Cardiology': 1, 'Neurology': 0}

    def test_create_is_admin_only(self, client_for, admin, doctor):
        payload = {'name': 'Radiology', 'description': 'Imaging'}
        assert client_for(doctor.user).post('/api/departments/', payload, format='json').status_code == 403

        response = client_for(admin).post('/api/departments/', payload, format='json')
        assert response.status_code == 201
        assert Department.objects.filter(name='Radiology').exists()

    def test_duplicate_name_rejected(self, client_for, admin, department):
        response = client_for(admin).post('/api/departments/', {'name': 'Cardiology'}, format='json')
        assert response.status_code == 400

    def test_assign_head(self, client_for, admin, department, doctor):
        response = client_for(admin).patch(
            f'/api/departments/{department.pk}/', {'headId': doctor.pk}, format='json'
        )
        assert response.status_code == 200
        assert response.data['data']['head']['id'] == doctor.pk

    def test_delete(self, client_for, admin, department):
        response = client_for(admin).delete(f'/api/departments/{department.pk}/')
        assert response.status_code == 200
        assert not Department.objects.exists()


class TestDoctors:

    def test_list_filters_by_department(self, api_client, doctor, other_doctor, department):
        response = api_client.get('/api/doctors/', {'department': department.pk})

        assert response.status_code == 200
        assert [d['id'] for d in response.data['data']] == [doctor.pk]

    def test_list_filters_by_availability(self, api_client, doctor, other_doctor):
        Doctor.objects.filter(pk=other_doctor.pk).update(available=False)

        response = api_client.get('/api/doctors/', {'available': 'true'})

        assert [d['id'] for d in response.data['data']] == [doctor.pk]

    def test_by_user(self, client_for, patient, doctor):
        response = client_for(patient.user).get(f'/api/doctors/by-user/{doctor.user.pk}/')
        assert response.status_code == 200
        assert response.data['data']['id'] == doctor.pk

    def test_by_user_not_found(self, client_for, patient):
        response = client_for(patient.user).get(f'/api/doctors/by-user/{patient.user.pk}/')
        assert response.status_code == 404

    def test_admin_creates_profile_for_doctor_user(self, client_for, admin, department):
        user = make_user(User.DOCTOR, 'cuddy@hospital.test')

        response = client_for(admin).post('/api/doctors/', {
            'userId': user.pk, 'specialization': 'Endocrinologist', 'fee': '800.00', 'departmentId': department.pk,
        }, format='json')

        assert response.status_code == 201
        assert Doctor.objects.get(user=user).department == department

    def test_create_requires_doctor_role(self, client_for, admin, patient):
        response = client_for(admin).post('/api/doctors/', {
            'userId': patient.user.pk, 'specialization': 'None', 'fee': '100.00',
        }, format='json')

        assert response.status_code == 400
        assert 'User role must be Doctor' in response.data['message']

    def test_create_unknown_user(self, client_for, admin):
        response = client_for(admin).post('/api/doctors/', {
            'userId': 9999, 'specialization': 'None', 'fee': '100.00',
        }, format='json')
        assert response.status_code == 400
        assert 'User not found' in response.data['message']

    def test_schedule_rejects_unknown_weekday(self, client_for, admin, doctor):
        response = client_for(admin).patch(
            f'/api/doctors/{doctor.pk}/', {'schedule': {'funday': {'start': '09:00'}}}, format='json'
        )
        assert response.status_code == 400

    def test_doctor_cannot_delete(self, client_for, doctor):
        assert client_for(doctor.user).delete(f'/api/doctors/{doctor.pk}/').status_code == 403

    def test_non_numeric_id(self, api_client):
        assert api_client.get('/api/doctors/abc/').status_code == 404
        assert api_client.get('/api/departments/abc/').status_code == 404
