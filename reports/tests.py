import os
from datetime import date, timedelta

import pandas as pd
import pytest
from django.utils import timezone

from appointments.models import Appointment
from doctors.models import Department
from payments.models import Payment
from prescriptions.models import Prescription
from reports.analytics import appointments_trend, department_stats, get_analytics, patient_growth
from reports.models import ReportGeneration
from reports.tasks import generate_report_task

pytestmark = pytest.mark.django_db


class TestAnalytics:

    def test_admin_only(self, client_for, doctor):
        assert client_for(doctor.user).get('/api/admin/analytics/').status_code == 403

    def test_revenue_counts_only_paid(self, client_for, admin, patient):
        Payment.objects.create(patient=patient, amount=100, status=Payment.PAID)
        Payment.objects.create(patient=patient, amount=50, status=Payment.PENDING)

        response = client_for(admin).get('/api/admin/analytics/')

        assert response.status_code == 200
        assert response.data['data']['summary']['revenue'] == 100

    def test_revenue_is_zero_without_payments(self):
        assert get_analytics()['summary']['revenue'] == 0

    def test_summary_counts(self, doctor, patient):
        today = timezone.localdate()
        Appointment.objects.create(patient=patient, doctor=doctor, date=today - timedelta(days=2), time='09:00',
                                   is_urgent=True)
        Appointment.objects.create(patient=patient, doctor=doctor, date=today, time='10:00',
                                   is_urgent=True, status=Appointment.COMPLETED)
        Appointment.objects.create(patient=patient, doctor=doctor, date=today + timedelta(days=5), time='11:00')

        summary = get_analytics(today)['summary']

        assert summary['totalPatients'] == 1
        assert summary['totalDoctors'] == 1
        assert summary['totalAppointments'] == 3
        assert summary['todayAppointments'] == 2
        assert summary['urgentCases'] == 1

    def test_trend_covers_trailing_week(self, doctor, patient):
        today = date(2024, 1, 7)
        for day in (date(2024, 1, 1), date(2024, 1, 7), date(2024, 1, 7), date(2023, 12, 31)):
            Appointment.objects.create(patient=patient, doctor=doctor, date=day, time='09:00')

        trend = appointments_trend(today)

        assert [entry['name'] for entry in trend] == ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
        assert [entry['count'] for entry in trend] == [1, 0, 0, 0, 0, 0, 2]
        assert trend[0]['date'] == '2024-01-01'
        assert trend[-1]['date'] == '2024-01-07'

    def test_department_stats_skip_empty_departments(self, doctor, other_doctor):
        Department.objects.create(name='Neurology')

        stats = department_stats()

        assert stats == [{'id': doctor.department_id, 'name': 'Cardiology', 'count': 1}]

    def test_patient_growth_by_month(self, patient, other_patient):
        month = timezone.localtime().month

        growth = patient_growth()

        assert len(growth) == 1
        assert growth[0]['month'] == month
        assert growth[0]['count'] == 2
        assert growth[0]['name'] == timezone.localtime().strftime('%b')


class TestDashboard:

    def test_stats(self, client_for, patient, doctor, appointment):
        response = client_for(patient.user).get('/api/dashboard/stats/')
        assert response.data['data']['totalAppointments'] == 1

    def test_recent_returns_latest_five(self, client_for, admin, doctor, patient):
        for hour in range(7):
            Appointment.objects.create(patient=patient, doctor=doctor, time=f'{9 + hour:02d}:00')

        response = client_for(admin).get('/api/dashboard/recent/')

        assert len(response.data['data']) == 5

    def test_doctor_dashboard(self, client_for, doctor, patient, other_patient, appointment):
        Appointment.objects.create(patient=other_patient, doctor=doctor, time='12:00',
                                   status=Appointment.COMPLETED, is_urgent=True)
        Prescription.objects.create(patient=patient, doctor=doctor, appointment=appointment)

        response = client_for(doctor.user).get(f'/api/dashboard/doctor/{doctor.pk}/')

        data = response.data['data']
        assert data['totalAppointments'] == 2
        assert data['todayAppointments'] == 2
        assert data['pendingAppointments'] == 1
        assert data['completedAppointments'] == 1
        assert data['urgentCases'] == 0
        assert data['totalPatients'] == 2
        assert data['prescriptionsIssued'] == 1

    def test_doctor_dashboard_of_colleague(self, client_for, other_doctor, doctor):
        response = client_for(other_doctor.user).get(f'/api/dashboard/doctor/{doctor.pk}/')
        assert response.status_code == 401


class TestReportExports:

    @pytest.fixture(autouse=True)
    def media_root(self, settings, tmp_path):
        settings.MEDIA_ROOT = tmp_path

    def test_generate_queues_task(self, client_for, admin, monkeypatch):
        queued = []

        class QueueSpy:
            def delay(self, report_id):
                queued.append(report_id)

        monkeypatch.setattr('reports.views.generate_report_task', QueueSpy())

        response = client_for(admin).post('/api/admin/reports/generate/', {
            'report_type': 'revenue', 'start_date': '2024-01-01', 'end_date': '2024-01-31',
        }, format='json')

        assert response.status_code == 202
        report = ReportGeneration.objects.get()
        assert queued == [report.pk]
        assert response.data['data']['status'] == 'processing'

    def test_invalid_date_range(self, client_for, admin):
        response = client_for(admin).post('/api/admin/reports/generate/', {
            'report_type': 'revenue', 'start_date': '2024-02-01', 'end_date': '2024-01-01',
        }, format='json')
        assert response.status_code == 400

    def test_unknown_report_type(self, client_for, admin):
        response = client_for(admin).post('/api/admin/reports/generate/', {'report_type': 'device_usage'}, format='json')
        assert response.status_code == 400

    def test_appointment_summary_file(self, admin, doctor, patient, appointment):
        report = ReportGeneration.objects.create(generated_by=admin, report_type='appointment_summary')

        generate_report_task(report.pk)

        report.refresh_from_db()
        assert report.status == 'ready'
        assert os.path.exists(report.file_path.path)
        df = pd.read_excel(report.file_path.path)
        assert list(df['Patient']) == ['Jane Doe']
        assert list(df['Doctor']) == ['Gregory House']

    def test_empty_period_still_writes_file(self, admin):
        report = ReportGeneration.objects.create(generated_by=admin, report_type='prescription_activity')

        generate_report_task(report.pk)

        report.refresh_from_db()
        df = pd.read_excel(report.file_path.path)
        assert list(df.columns) == ['Message']

    def test_status_and_download(self, client_for, admin, patient):
        Payment.objects.create(patient=patient, amount=100, status=Payment.PAID)
        report = ReportGeneration.objects.create(generated_by=admin, report_type='revenue')
        generate_report_task(report.pk)
        client = client_for(admin)

        status = client.get(f'/api/admin/reports/{report.pk}/status/')
        assert status.data['data']['downloadUrl'] == f'/api/admin/reports/{report.pk}/download/'

        download = client.get(f'/api/admin/reports/{report.pk}/download/')
        assert download.status_code == 200
        assert 'attachment' in download['Content-Disposition']
        download.close()

    def test_download_before_ready(self, client_for, admin):
        report = ReportGeneration.objects.create(generated_by=admin, report_type='revenue')
        response = client_for(admin).get(f'/api/admin/reports/{report.pk}/download/')
        assert response.status_code == 404

    def test_list(self, client_for, admin):
        ReportGeneration.objects.create(generated_by=admin, report_type='revenue')
        ReportGeneration.objects.create(generated_by=admin, report_type='appointment_summary')

        response = client_for(admin).get('/api/admin/reports/', {'report_type': 'revenue'})

        assert response.data['count'] == 1
