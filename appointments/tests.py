from datetime import timedelta

import pytest
from django.utils import timezone

from appointments.models import Appointment
from appointments.workflow import AppointmentWorkflow, normalize_time
from HospitalBackend.exceptions import InvalidInput, NotFound
from notifications.models import Notification

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize('raw, expected', [
    ('14:30', '14:30'),
    ('2:30 PM', '14:30'),
    ('09:05 am', '09:05'),
    ('08:15:00', '08:15'),
])
def test_normalize_time(raw, expected):
    assert normalize_time(raw) == expected


def test_normalize_time_rejects_garbage():
    with pytest.raises(ValueError):
        normalize_time('half past ten')


class TestCreate:

    def test_defaults_to_pending(self, client_for, patient, doctor):
        response = client_for(patient.user).post('/api/appointments/', {
            'patientId': patient.pk, 'doctorId': doctor.pk, 'time': '2:30 PM', 'reason': 'Chest pain',
        }, format='json')

        assert response.status_code == 201
        data = response.data['data']
        assert data['status'] == 'Pending'
        assert data['time'] == '14:30'
        assert data['date'] == timezone.localdate().isoformat()
        assert data['patientId'] == patient.pk
        assert 'patient' not in data

    def test_doctor_is_notified(self, client_for, patient, doctor):
        client_for(patient.user).post('/api/appointments/', {
            'patientId': patient.pk, 'doctorId': doctor.pk, 'time': '10:00', 'isUrgent': True,
        }, format='json')

        notification = Notification.objects.get(user=doctor.user)
        assert notification.type == 'Urgent'

    def test_missing_time(self, client_for, patient, doctor):
        response = client_for(patient.user).post('/api/appointments/', {
            'patientId': patient.pk, 'doctorId': doctor.pk,
        }, format='json')

        assert response.status_code == 400
        assert response.data['success'] is False
        assert not Appointment.objects.exists()

    def test_unknown_doctor(self, client_for, admin, patient):
        response = client_for(admin).post('/api/appointments/', {
            'patientId': patient.pk, 'doctorId': 4242, 'time': '10:00',
        }, format='json')
        assert response.status_code == 404

    def test_status_outside_enum(self, client_for, admin, patient, doctor):
        response = client_for(admin).post('/api/appointments/', {
            'patientId': patient.pk, 'doctorId': doctor.pk, 'time': '10:00', 'status': 'Archived',
        }, format='json')
        assert response.status_code == 400

    def test_patient_books_only_for_self(self, client_for, patient, other_patient, doctor):
        response = client_for(patient.user).post('/api/appointments/', {
            'patientId': other_patient.pk, 'doctorId': doctor.pk, 'time': '10:00',
        }, format='json')
        assert response.status_code == 401

    def test_pharmacist_cannot_book(self, client_for, pharmacist, patient, doctor):
        response = client_for(pharmacist.user).post('/api/appointments/', {
            'patientId': patient.pk, 'doctorId': doctor.pk, 'time': '10:00',
        }, format='json')
        assert response.status_code == 403


class TestUpdate:

    def test_doctor_confirms_then_completes(self, client_for, doctor, appointment):
        client = client_for(doctor.user)
        url = f'/api/appointments/{appointment.pk}/'

        assert client.patch(url, {'status': 'Confirmed'}, format='json').status_code == 200
        response = client.patch(url, {'status': 'Completed', 'diagnosis': 'Angina'}, format='json')

        assert response.status_code == 200
        appointment.refresh_from_db()
        assert appointment.status == 'Completed'
        assert appointment.diagnosis == 'Angina'

    def test_pending_cannot_jump_to_completed(self, client_for, doctor, appointment):
        response = client_for(doctor.user).patch(
            f'/api/appointments/{appointment.pk}/', {'status': 'Completed'}, format='json'
        )
        assert response.status_code == 400
        appointment.refresh_from_db()
        assert appointment.status == 'Pending'

    def test_cancelled_is_terminal(self, client_for, doctor, appointment):
        Appointment.objects.filter(pk=appointment.pk).update(status='Cancelled')
        response = client_for(doctor.user).patch(
            f'/api/appointments/{appointment.pk}/', {'status': 'Confirmed'}, format='json'
        )
        assert response.status_code == 400

    def test_only_supplied_fields_change(self, client_for, doctor, appointment):
        Appointment.objects.filter(pk=appointment.pk).update(diagnosis='Flu')
        client_for(doctor.user).patch(
            f'/api/appointments/{appointment.pk}/', {'consultationNotes': 'Rest'}, format='json'
        )
        appointment.refresh_from_db()
        assert appointment.consultation_notes == 'Rest'
        assert appointment.diagnosis == 'Flu'
        assert appointment.status == 'Pending'

    def test_patient_can_cancel(self, client_for, patient, appointment):
        response = client_for(patient.user).patch(
            f'/api/appointments/{appointment.pk}/', {'status': 'Cancelled'}, format='json'
        )
        assert response.status_code == 200

    def test_patient_cannot_write_notes(self, client_for, patient, appointment):
        response = client_for(patient.user).patch(
            f'/api/appointments/{appointment.pk}/', {'consultationNotes': 'I feel fine'}, format='json'
        )
        assert response.status_code == 401

    def test_other_doctor_cannot_update(self, client_for, other_doctor, appointment):
        response = client_for(other_doctor.user).patch(
            f'/api/appointments/{appointment.pk}/', {'status': 'Confirmed'}, format='json'
        )
        assert response.status_code == 401

    def test_unknown_id(self, client_for, admin):
        response = client_for(admin).patch('/api/appointments/999/', {'status': 'Confirmed'}, format='json')
        assert response.status_code == 404

    def test_non_numeric_id(self, client_for, admin):
        assert client_for(admin).get('/api/appointments/abc/').status_code == 404
        assert client_for(admin).patch('/api/appointments/abc/', {}, format='json').status_code == 404


class TestListing:

    @pytest.fixture
    def two_appointments(self, doctor, patient):
        today = timezone.localdate()
        later = Appointment.objects.create(patient=patient, doctor=doctor, date=today + timedelta(days=3), time='09:00')
        sooner = Appointment.objects.create(patient=patient, doctor=doctor, date=today + timedelta(days=1), time='16:00')
        return sooner, later

    def test_doctor_list_is_ascending(self, client_for, doctor, two_appointments):
        sooner, later = two_appointments
        response = client_for(doctor.user).get(f'/api/appointments/doctor/{doctor.pk}/')

        assert response.status_code == 200
        assert response.data['count'] == 2
        assert [a['id'] for a in response.data['data']] == [sooner.pk, later.pk]
        assert response.data['data'][0]['patient']['user']['name'] == 'Jane Doe'

    def test_patient_list_is_descending(self, client_for, patient, two_appointments):
        sooner, later = two_appointments
        response = client_for(patient.user).get(f'/api/appointments/patient/{patient.pk}/')

        assert [a['id'] for a in response.data['data']] == [later.pk, sooner.pk]
        assert response.data['data'][0]['doctor']['user']['name'] == 'Gregory House'

    def test_same_day_ordered_by_time(self, client_for, doctor, patient):
        today = timezone.localdate()
        late = Appointment.objects.create(patient=patient, doctor=doctor, date=today, time='15:00')
        early = Appointment.objects.create(patient=patient, doctor=doctor, date=today, time='08:30')

        response = client_for(doctor.user).get(f'/api/appointments/doctor/{doctor.pk}/')

        assert [a['id'] for a in response.data['data']] == [early.pk, late.pk]

    def test_doctor_cannot_read_colleague_schedule(self, client_for, other_doctor, doctor):
        response = client_for(other_doctor.user).get(f'/api/appointments/doctor/{doctor.pk}/')
        assert response.status_code == 401

    def test_list_is_scoped_to_caller(self, client_for, admin, other_doctor, other_patient, appointment):
        Appointment.objects.create(patient=other_patient, doctor=other_doctor, time='11:00')

        assert client_for(admin).get('/api/appointments/').data['count'] == 2
        assert client_for(other_doctor.user).get('/api/appointments/').data['count'] == 1
        mine = client_for(appointment.patient.user).get('/api/appointments/').data['data']
        assert [a['id'] for a in mine] == [appointment.pk]

    def test_retrieve_by_stranger(self, client_for, other_patient, appointment):
        response = client_for(other_patient.user).get(f'/api/appointments/{appointment.pk}/')
        assert response.status_code == 401


class TestDelete:

    def test_admin_deletes(self, client_for, admin, appointment):
        response = client_for(admin).delete(f'/api/appointments/{appointment.pk}/')
        assert response.status_code == 200
        assert not Appointment.objects.exists()

    def test_unknown_id(self, client_for, admin):
        assert client_for(admin).delete('/api/appointments/999/').status_code == 404

    def test_patient_cannot_delete(self, client_for, patient, appointment):
        assert client_for(patient.user).delete(f'/api/appointments/{appointment.pk}/').status_code == 401


class TestWorkflow:

    def test_injected_notifier(self, patient, doctor):
        sent = []
        workflow = AppointmentWorkflow(notifier=lambda user, **kwargs: sent.append((user, kwargs)))

        workflow.create(patient_id=patient.pk, doctor_id=doctor.pk, time='10:00')

        assert len(sent) == 1
        assert sent[0][0] == doctor.user
        assert sent[0][1]['type'] == 'Appointment'

    def test_unknown_patient(self, doctor):
        with pytest.raises(NotFound):
            AppointmentWorkflow().create(patient_id=999, doctor_id=doctor.pk, time='10:00')

    def test_complete_rejects_cancelled(self, appointment):
        appointment.status = Appointment.CANCELLED
        with pytest.raises(InvalidInput):
            AppointmentWorkflow().complete(appointment)

    def test_complete_keeps_completed(self, appointment):
        appointment.status = Appointment.COMPLETED
        appointment.save()
        AppointmentWorkflow().complete(appointment)
        appointment.refresh_from_db()
        assert appointment.status == Appointment.COMPLETED
