import pytest

from notifications.models import Notification
from notifications.services import notify

pytestmark = pytest.mark.django_db


def test_inbox_shows_latest_twenty_of_own(client_for, patient, other_patient):
    for i in range(25):
        notify(patient.user, title=f'Note {i}', message='...')
    notify(other_patient.user, title='Not yours', message='...')

    response = client_for(patient.user).get('/api/notifications/')

    assert response.status_code == 200
    assert response.data['count'] == 20
    assert response.data['unread'] == 25
    assert response.data['data'][0]['title'] == 'Note 24'


def test_mark_read(client_for, patient):
    notification = notify(patient.user, title='Hello', message='...')

    response = client_for(patient.user).patch(f'/api/notifications/{notification.pk}/read/')

    assert response.status_code == 200
    notification.refresh_from_db()
    assert notification.is_read is True


def test_cannot_mark_someone_elses(client_for, patient, other_patient):
    notification = notify(patient.user, title='Hello', message='...')
    response = client_for(other_patient.user).patch(f'/api/notifications/{notification.pk}/read/')
    assert response.status_code == 404


def test_read_all(client_for, patient):
    notify(patient.user, title='One', message='...')
    notify(patient.user, title='Two', message='...')

    client_for(patient.user).patch('/api/notifications/read-all/')

    assert not Notification.objects.filter(user=patient.user, is_read=False).exists()


def test_only_admin_creates(client_for, admin, patient):
    payload = {'userId': patient.user.pk, 'title': 'Clinic closed', 'message': 'Closed on Friday'}
    assert client_for(patient.user).post('/api/notifications/', payload, format='json').status_code == 403

    response = client_for(admin).post('/api/notifications/', payload, format='json')
    assert response.status_code == 201
    assert Notification.objects.get().type == 'General'
