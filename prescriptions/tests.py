import pytest

from appointments.models import Appointment
from prescriptions.models import Prescription
from prescriptions.workflow import PrescriptionWorkflow

pytestmark = pytest.mark.django_db

MEDICINES = [{'name': 'Aspirin', 'dosage': '75mg', 'frequency': 'Once a day', 'duration': '30 days'}]


@pytest.fixture
def prescription(doctor, patient, appointment):
    return Prescription.objects.create(
        patient=patient, doctor=doctor, appointment=appointment, diagnosis='Angina', medicines=MEDICINES,
    )


class TestIssue:

    def test_prescribing_completes_the_appointment(self, client_for, doctor, patient, appointment):
        response = client_for(doctor.user).post('/api/prescriptions/', {
            'appointmentId': appointment.pk, 'patientId': patient.pk,
            'diagnosis': 'Angina', 'medicines': MEDICINES, 'instructions': 'Avoid exertion',
        }, format='json')

        assert response.status_code == 201
        data = response.data['data']
        assert data['status'] == 'PENDING'
        assert data['doctorId'] == doctor.pk
        appointment.refresh_from_db()
        assert appointment.status == Appointment.COMPLETED

    def test_patient_defaults_to_appointment_patient(self, client_for, doctor, patient, appointment):
        response = client_for(doctor.user).post('/api/prescriptions/', {
            'appointmentId': appointment.pk, 'medicines': MEDICINES,
        }, format='json')

        assert response.status_code == 201
        assert response.data['data']['patientId'] == patient.pk

    def test_confirmed_appointment_is_completed(self, client_for, doctor, appointment):
        Appointment.objects.filter(pk=appointment.pk).update(status=Appointment.CONFIRMED)
        client_for(doctor.user).post('/api/prescriptions/', {'appointmentId': appointment.pk}, format='json')
        appointment.refresh_from_db()
        assert appointment.status == Appointment.COMPLETED

    def test_missing_appointment_id(self, client_for, doctor):
        response = client_for(doctor.user).post('/api/prescriptions/', {'medicines': MEDICINES}, format='json')
        assert response.status_code == 400

    def test_unknown_appointment(self, client_for, doctor):
        response = client_for(doctor.user).post('/api/prescriptions/', {'appointmentId': 999}, format='json')
        assert response.status_code == 404

    def test_other_doctor_cannot_prescribe(self, client_for, other_doctor, appointment):
        response = client_for(other_doctor.user).post(
            '/api/prescriptions/', {'appointmentId': appointment.pk}, format='json'
        )

        assert response.status_code == 401
        appointment.refresh_from_db()
        assert appointment.status == Appointment.PENDING
        assert not Prescription.objects.exists()

    def test_patient_mismatch(self, client_for, doctor, other_patient, appointment):
        response = client_for(doctor.user).post('/api/prescriptions/', {
            'appointmentId': appointment.pk, 'patientId': other_patient.pk,
        }, format='json')
        assert response.status_code == 400

    def test_cancelled_appointment(self, client_for, doctor, appointment):
        Appointment.objects.filter(pk=appointment.pk).update(status=Appointment.CANCELLED)
        response = client_for(doctor.user).post(
            '/api/prescriptions/', {'appointmentId': appointment.pk}, format='json'
        )
        assert response.status_code == 400
        assert not Prescription.objects.exists()

    def test_medicine_requires_dosage(self, client_for, doctor, appointment):
        response = client_for(doctor.user).post('/api/prescriptions/', {
            'appointmentId': appointment.pk, 'medicines': [{'name': 'Aspirin', 'duration': '3 days'}],
        }, format='json')
        assert response.status_code == 400

    def test_only_doctors_prescribe(self, client_for, admin, appointment):
        response = client_for(admin).post('/api/prescriptions/', {'appointmentId': appointment.pk}, format='json')
        assert response.status_code == 403

    def test_failed_insert_leaves_appointment_untouched(self, doctor, appointment):
        class BrokenStore:
            def create(self, **kwargs):
                raise RuntimeError('disk full')

        workflow = PrescriptionWorkflow(prescriptions=BrokenStore())
        with pytest.raises(RuntimeError):
            workflow.create(doctor=doctor, appointment_id=appointment.pk, medicines=MEDICINES)

        appointment.refresh_from_db()
        assert appointment.status == Appointment.PENDING


class TestEdit:

    def test_author_updates(self, client_for, doctor, prescription):
        response = client_for(doctor.user).patch(
            f'/api/prescriptions/{prescription.pk}/', {'instructions': 'With food'}, format='json'
        )
        assert response.status_code == 200
        prescription.refresh_from_db()
        assert prescription.instructions == 'With food'
        assert prescription.diagnosis == 'Angina'

    def test_non_author_update_is_unauthorized(self, client_for, other_doctor, prescription):
        response = client_for(other_doctor.user).patch(
            f'/api/prescriptions/{prescription.pk}/', {'diagnosis': 'Nothing'}, format='json'
        )
        assert response.status_code == 401
        prescription.refresh_from_db()
        assert prescription.diagnosis == 'Angina'

    def test_unknown_id(self, client_for, doctor):
        response = client_for(doctor.user).patch('/api/prescriptions/999/', {'diagnosis': 'x'}, format='json')
        assert response.status_code == 404


class TestQueries:

    def test_role_scoped_list(self, client_for, doctor, other_doctor, pharmacist, prescription):
        assert client_for(doctor.user).get('/api/prescriptions/').data['count'] == 1
        assert client_for(other_doctor.user).get('/api/prescriptions/').data['count'] == 0
        assert client_for(pharmacist.user).get('/api/prescriptions/').data['count'] == 1

    def test_patient_sees_own(self, client_for, patient, other_patient, prescription):
        assert client_for(patient.user).get(f'/api/prescriptions/patient/{patient.pk}/').data['count'] == 1
        response = client_for(other_patient.user).get(f'/api/prescriptions/patient/{patient.pk}/')
        assert response.status_code == 401

    def test_by_doctor(self, client_for, doctor, other_doctor, prescription):
        response = client_for(doctor.user).get(f'/api/prescriptions/doctor/{doctor.pk}/')
        assert response.data['data'][0]['patient']['user']['name'] == 'Jane Doe'
        assert client_for(other_doctor.user).get(f'/api/prescriptions/doctor/{doctor.pk}/').status_code == 401

    def test_detail(self, client_for, pharmacist, other_patient, prescription):
        response = client_for(pharmacist.user).get(f'/api/prescriptions/{prescription.pk}/')
        assert response.data['data']['doctor']['user']['name'] == 'Gregory House'
        assert client_for(other_patient.user).get(f'/api/prescriptions/{prescription.pk}/').status_code == 401

    def test_non_numeric_id(self, client_for, pharmacist):
        client = client_for(pharmacist.user)
        assert client.get('/api/prescriptions/abc/').status_code == 404
        assert client.patch('/api/pharmacy/prescriptions/abc/approve/', {}, format='json').status_code == 404


class TestPharmacy:

    def url(self, prescription, action):
        return f'/api/pharmacy/prescriptions/{prescription.pk}/{action}/'

    def test_approve_with_default_note(self, client_for, pharmacist, prescription):
        response = client_for(pharmacist.user).patch(self.url(prescription, 'approve'), {}, format='json')

        assert response.status_code == 200
        prescription.refresh_from_db()
        assert prescription.status == Prescription.APPROVED
        assert prescription.pharmacy_notes == 'Approved by pharmacy'

    def test_approve_with_notes(self, client_for, pharmacist, prescription):
        client_for(pharmacist.user).patch(self.url(prescription, 'approve'), {'notes': 'Generic given'}, format='json')
        prescription.refresh_from_db()
        assert prescription.pharmacy_notes == 'Generic given'

    def test_reject_requires_notes(self, client_for, pharmacist, prescription):
        response = client_for(pharmacist.user).patch(self.url(prescription, 'reject'), {'notes': '  '}, format='json')

        assert response.status_code == 400
        prescription.refresh_from_db()
        assert prescription.status == Prescription.PENDING

    def test_reject_without_any_reason(self, client_for, pharmacist, prescription):
        response = client_for(pharmacist.user).patch(self.url(prescription, 'reject'), {}, format='json')

        assert response.status_code == 400
        assert response.data['success'] is False
        prescription.refresh_from_db()
        assert prescription.status == Prescription.PENDING
        assert prescription.pharmacy_notes == ''

    def test_decisions_under_prescriptions_route(self, client_for, pharmacist, prescription):
        client = client_for(pharmacist.user)

        response = client.patch(f'/api/prescriptions/{prescription.pk}/approve/', {}, format='json')
        assert response.status_code == 200
        assert client.patch(f'/api/prescriptions/{prescription.pk}/dispense/', {}, format='json').status_code == 200
        prescription.refresh_from_db()
        assert prescription.status == Prescription.DISPENSED

    def test_reject_under_prescriptions_route(self, client_for, doctor, pharmacist, prescription):
        url = f'/api/prescriptions/{prescription.pk}/reject/'
        assert client_for(doctor.user).patch(url, {'notes': 'No'}, format='json').status_code == 403

        response = client_for(pharmacist.user).patch(url, {'notes': 'Interaction risk'}, format='json')
        assert response.status_code == 200
        prescription.refresh_from_db()
        assert prescription.status == Prescription.REJECTED

    def test_reject_accepts_rejection_reason(self, client_for, pharmacist, prescription):
        response = client_for(pharmacist.user).patch(
            self.url(prescription, 'reject'), {'rejectionReason': 'Out of stock'}, format='json'
        )

        assert response.status_code == 200
        prescription.refresh_from_db()
        assert prescription.status == Prescription.REJECTED
        assert prescription.pharmacy_notes == 'Out of stock'

    def test_dispense_after_approval(self, client_for, pharmacist, prescription):
        client = client_for(pharmacist.user)
        client.patch(self.url(prescription, 'approve'), {}, format='json')

        response = client.patch(self.url(prescription, 'dispense'), {}, format='json')

        assert response.status_code == 200
        prescription.refresh_from_db()
        assert prescription.status == Prescription.DISPENSED
        assert prescription.pharmacy_notes == 'Approved by pharmacy'

    def test_cannot_dispense_pending(self, client_for, pharmacist, prescription):
        response = client_for(pharmacist.user).patch(self.url(prescription, 'dispense'), {}, format='json')
        assert response.status_code == 400

    def test_cannot_approve_rejected(self, client_for, pharmacist, prescription):
        Prescription.objects.filter(pk=prescription.pk).update(status=Prescription.REJECTED)
        response = client_for(pharmacist.user).patch(self.url(prescription, 'approve'), {}, format='json')
        assert response.status_code == 400

    def test_doctor_cannot_adjudicate(self, client_for, doctor, prescription):
        response = client_for(doctor.user).patch(self.url(prescription, 'approve'), {}, format='json')
        assert response.status_code == 403

    def test_unknown_prescription(self, client_for, pharmacist):
        response = client_for(pharmacist.user).patch('/api/pharmacy/prescriptions/999/approve/', {}, format='json')
        assert response.status_code == 404

    def test_queues(self, client_for, admin, pharmacist, prescription, doctor, patient, appointment):
        approved = Prescription.objects.create(
            patient=patient, doctor=doctor, appointment=appointment, status=Prescription.APPROVED
        )

        pending = client_for(pharmacist.user).get('/api/pharmacy/prescriptions/pending/')
        assert [p['id'] for p in pending.data['data']] == [prescription.pk]

        approved_queue = client_for(admin).get('/api/pharmacy/prescriptions/approved/')
        assert [p['id'] for p in approved_queue.data['data']] == [approved.pk]

        assert client_for(pharmacist.user).get('/api/pharmacy/prescriptions/rejected/').data['count'] == 0
