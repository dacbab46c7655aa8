import pytest

from notifications.models import Notification
from patients.models import LabReport, MedicalRecord, Patient
from accounts.models import User
from conftest import make_user

pytestmark = pytest.mark.django_db


class TestPatients:

    def test_doctor_lists_only_own_patients(self, client_for, doctor, patient, other_patient, appointment):
        response = client_for(doctor.user).get('/api/patients/')

        assert response.status_code == 200
        assert [p['id'] for p in response.data['data']] == [patient.pk]

    def test_admin_search(self, client_for, admin, patient, other_patient):
        response = client_for(admin).get('/api/patients/', {'search': 'jane'})
        assert [p['id'] for p in response.data['data']] == [patient.pk]

    def test_patient_cannot_list(self, client_for, patient):
        assert client_for(patient.user).get('/api/patients/').status_code == 403

    def test_patient_reads_own_profile(self, client_for, patient):
        response = client_for(patient.user).get(f'/api/patients/{patient.pk}/')
        assert response.status_code == 200
        assert response.data['data']['user']['email'] == 'jane@example.com'

    def test_patient_cannot_read_others(self, client_for, patient, other_patient):
        response = client_for(patient.user).get(f'/api/patients/{other_patient.pk}/')
        assert response.status_code == 401

    def test_update_medical_history(self, client_for, patient):
        history = [{'condition': 'Asthma', 'date': '2015-03-01', 'notes': 'Inhaler'}]
        response = client_for(patient.user).patch(
            f'/api/patients/{patient.pk}/', {'medicalHistory': history, 'bloodGroup': 'O+'}, format='json'
        )

        assert response.status_code == 200
        patient.refresh_from_db()
        assert patient.medical_history == history
        assert patient.blood_group == 'O+'

    def test_medical_history_requires_condition(self, client_for, patient):
        response = client_for(patient.user).patch(
            f'/api/patients/{patient.pk}/', {'medicalHistory': [{'notes': 'no condition'}]}, format='json'
        )
        assert response.status_code == 400

    def test_only_admin_changes_status(self, client_for, admin, patient):
        url = f'/api/patients/{patient.pk}/'
        assert client_for(patient.user).patch(url, {'status': 'Blocked'}, format='json').status_code == 403
        assert client_for(admin).patch(url, {'status': 'Blocked'}, format='json').status_code == 200

    def test_admin_creates_profile(self, client_for, admin):
        user = make_user(User.PATIENT, 'new@example.com')
        response = client_for(admin).post('/api/patients/create/', {'userId': user.pk, 'age': 40}, format='json')

        assert response.status_code == 201
        assert Patient.objects.get(user=user).age == 40

    def test_create_rejects_non_patient_user(self, client_for, admin, doctor):
        response = client_for(admin).post('/api/patients/create/', {'userId': doctor.user.pk}, format='json')
        assert response.status_code == 400

    def test_by_user(self, client_for, admin, patient):
        response = client_for(admin).get(f'/api/patients/by-user/{patient.user.pk}/')
        assert response.data['data']['id'] == patient.pk


class TestRecords:

    def test_doctor_writes_medical_record(self, client_for, doctor, patient, appointment):
        response = client_for(doctor.user).post('/api/medical-records/', {
            'patientId': patient.pk, 'appointmentId': appointment.pk,
            'diagnosis': 'Hypertension', 'treatment': 'Lisinopril',
        }, format='json')

        assert response.status_code == 201
        record = MedicalRecord.objects.get()
        assert record.doctor == doctor
        assert record.appointment == appointment

    def test_admin_must_name_the_doctor(self, client_for, admin, patient):
        response = client_for(admin).post('/api/medical-records/', {
            'patientId': patient.pk, 'diagnosis': 'Flu',
        }, format='json')
        assert response.status_code == 400

    def test_records_are_scoped(self, client_for, doctor, other_doctor, patient, appointment):
        MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='Flu')

        response = client_for(doctor.user).get(f'/api/medical-records/patient/{patient.pk}/')
        assert response.data['count'] == 1
        response = client_for(other_doctor.user).get(f'/api/medical-records/patient/{patient.pk}/')
        assert response.status_code == 401

    def test_unknown_patient(self, client_for, admin):
        assert client_for(admin).get('/api/medical-records/patient/999/').status_code == 404


class TestLabReports:

    @pytest.fixture
    def lab_report(self, doctor, patient):
        return LabReport.objects.create(patient=patient, doctor=doctor, test_name='Lipid Profile')

    def test_order_lab_test(self, client_for, doctor, patient):
        response = client_for(doctor.user).post('/api/lab-reports/', {
            'patientId': patient.pk, 'testName': 'CBC',
        }, format='json')

        assert response.status_code == 201
        assert response.data['data']['status'] == 'Pending'

    def test_recording_results_notifies_patient(self, client_for, doctor, patient, lab_report):
        response = client_for(doctor.user).patch(
            f'/api/lab-reports/{lab_report.pk}/', {'results': 'LDL 130 mg/dL'}, format='json'
        )

        assert response.status_code == 200
        lab_report.refresh_from_db()
        assert lab_report.status == 'Completed'
        notification = Notification.objects.get(user=patient.user)
        assert notification.type == 'LabResult'

    def test_other_doctor_cannot_record_results(self, client_for, other_doctor, lab_report):
        response = client_for(other_doctor.user).patch(
            f'/api/lab-reports/{lab_report.pk}/', {'results': 'n/a'}, format='json'
        )
        assert response.status_code == 401

    def test_patient_reads_own_reports(self, client_for, patient, lab_report):
        response = client_for(patient.user).get(f'/api/lab-reports/patient/{patient.pk}/')
        assert response.data['data'][0]['testName'] == 'Lipid Profile'
