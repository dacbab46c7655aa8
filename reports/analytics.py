"""
Read-only aggregations behind the admin analytics and dashboard endpoints.
"""
import calendar
import logging
from datetime import timedelta

from django.db.models import Count, Q, Sum
from django.db.models.functions import ExtractMonth
from django.utils import timezone

from appointments.models import Appointment
from doctors.models import Department, Doctor
from patients.models import Patient
from payments.models import Payment
from prescriptions.models import Prescription

logger = logging.getLogger(__name__)

TREND_DAYS = 7


def summary_counts(today):
    return {
        'totalPatients': Patient.objects.count(),
        'totalDoctors': Doctor.objects.count(),
        'totalAppointments': Appointment.objects.count(),
        'todayAppointments': Appointment.objects.filter(date__gte=today).count(),
        'urgentCases': Appointment.objects.filter(is_urgent=True).exclude(status=Appointment.COMPLETED).count(),
        'revenue': Payment.objects.filter(status=Payment.PAID).aggregate(total=Sum('amount'))['total'] or 0,
    }


def appointments_trend(today, days=TREND_DAYS):
    """
    Appointment counts for each of the trailing calendar days ending today,
    oldest first. Days without appointments are reported with a zero count.
    """
    start = today - timedelta(days=days - 1)
    counts = dict(
        Appointment.objects.filter(date__gte=start, date__lte=today)
        .values('date').annotate(count=Count('id')).values_list('date', 'count')
    )
    trend = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        trend.append({'name': day.strftime('%a'), 'date': day.isoformat(), 'count': counts.get(day, 0)})
    return trend


def department_stats():
    rows = Department.objects.annotate(count=Count('doctors')).filter(count__gt=0) \
        .order_by('name').values('id', 'name', 'count')
    return list(rows)


def patient_growth():
    # grouped by month-of-year over the whole history
    rows = Patient.objects.annotate(month=ExtractMonth('created_at')) \
        .values('month').annotate(count=Count('id')).order_by('month')
    return [
        {'name': calendar.month_abbr[row['month']], 'month': row['month'], 'count': row['count']}
        for row in rows
    ]


def get_analytics(today=None):
    """
    Admin dashboard summary and chart series.

    The sub-queries are independent; they run one after another and the
    response is assembled once all of them have returned.
    """
    today = today or timezone.localdate()
    data = {
        'summary': summary_counts(today),
        'charts': {
            'appointmentsTrend': appointments_trend(today),
            'departmentStats': department_stats(),
            'patientGrowth': patient_growth(),
        },
    }
    logger.info(f"Analytics computed for {today}")
    return data


def dashboard_stats():
    return {
        'totalPatients': Patient.objects.count(),
        'totalDoctors': Doctor.objects.count(),
        'totalAppointments': Appointment.objects.count(),
        'emergencyCases': Appointment.objects.filter(is_urgent=True)
        .exclude(status__in=[Appointment.COMPLETED, Appointment.CANCELLED]).count(),
    }


def doctor_stats(doctor, today=None):
    """Counters shown on a doctor's own dashboard."""
    today = today or timezone.localdate()
    counts = Appointment.objects.filter(doctor=doctor).aggregate(
        total=Count('id'),
        today=Count('id', filter=Q(date=today)),
        pending=Count('id', filter=Q(status=Appointment.PENDING)),
        completed=Count('id', filter=Q(status=Appointment.COMPLETED)),
        urgent=Count('id', filter=Q(is_urgent=True) & ~Q(status=Appointment.COMPLETED)),
        patients=Count('patient', distinct=True),
    )
    return {
        'totalAppointments': counts['total'],
        'todayAppointments': counts['today'],
        'pendingAppointments': counts['pending'],
        'completedAppointments': counts['completed'],
        'urgentCases': counts['urgent'],
        'totalPatients': counts['patients'],
        'prescriptionsIssued': Prescription.objects.filter(doctor=doctor).count(),
    }
