import io
import logging

import pandas as pd
from celery import shared_task
from django.core.files.base import ContentFile
from django.utils import timezone

from appointments.models import Appointment
from payments.models import Payment
from prescriptions.models import Prescription
from .models import ReportGeneration

logger = logging.getLogger(__name__)


def _in_range(queryset, field, start_date, end_date):
    if start_date:
        queryset = queryset.filter(**{f"{field}__gte": start_date})
    if end_date:
        queryset = queryset.filter(**{f"{field}__lte": end_date})
    return queryset


def appointment_summary_rows(start_date=None, end_date=None):
    queryset = _in_range(
        Appointment.objects.select_related('patient__user', 'doctor__user'), 'date', start_date, end_date
    ).order_by('date', 'time')
    return [{
        'Appointment ID': appointment.id,
        'Date': appointment.date.isoformat(),
        'Time': appointment.time,
        'Patient': appointment.patient.user.name,
        'Doctor': appointment.doctor.user.name,
        'Status': appointment.status,
        'Urgent': 'Yes' if appointment.is_urgent else 'No',
        'Reason': appointment.reason or '-',
    } for appointment in queryset]


def revenue_rows(start_date=None, end_date=None):
    queryset = _in_range(
        Payment.objects.select_related('patient__user'), 'date__date', start_date, end_date
    ).order_by('date')
    return [{
        'Payment ID': payment.id,
        'Date': payment.date.strftime('%Y-%m-%d %H:%M'),
        'Patient': payment.patient.user.name,
        'Amount': float(payment.amount),
        'Method': payment.method or '-',
        'Status': payment.status,
        'Transaction ID': payment.transaction_id or '-',
    } for payment in queryset]


def prescription_activity_rows(start_date=None, end_date=None):
    queryset = _in_range(
        Prescription.objects.select_related('patient__user', 'doctor__user'),
        'created_at__date', start_date, end_date
    ).order_by('created_at')
    return [{
        'Prescription ID': prescription.id,
        'Issued': prescription.created_at.strftime('%Y-%m-%d %H:%M'),
        'Patient': prescription.patient.user.name,
        'Doctor': prescription.doctor.user.name,
        'Diagnosis': prescription.diagnosis or '-',
        'Medicines': ", ".join(m.get('name', '') for m in prescription.medicines),
        'Status': prescription.status,
        'Pharmacy Notes': prescription.pharmacy_notes or '-',
    } for prescription in queryset]


ROW_BUILDERS = {
    'appointment_summary': appointment_summary_rows,
    'revenue': revenue_rows,
    'prescription_activity': prescription_activity_rows,
}


@shared_task
def generate_report_task(report_id):
    """
    Builds the Excel file of a ReportGeneration row and attaches it.
    The row ends up 'ready' with a file, or 'failed' with the error message.
    """
    report = ReportGeneration.objects.get(id=report_id)
    try:
        rows = ROW_BUILDERS[report.report_type](report.start_date, report.end_date)

        df = pd.DataFrame(rows)
        # an empty sheet cannot be written
        if df.empty:
            df = pd.DataFrame([{'Message': 'No data found for the selected period'}])

        output_buffer = io.BytesIO()
        with pd.ExcelWriter(output_buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Report Data')

        file_name = f"{report.report_type}_{timezone.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
        report.file_path.save(file_name, ContentFile(output_buffer.getvalue()), save=False)
        report.status = 'ready'
        report.save(update_fields=['file_path', 'status'])
        logger.info(f"Report {report_id} ({report.report_type}) generated with {len(rows)} row(s)")
        return f"Report {report_id} generated successfully."

    except Exception as e:
        logger.exception(f"Error generating report {report_id}: {e}")
        report.status = 'failed'
        report.error = str(e)
        report.save(update_fields=['status', 'error'])
        return f"Failed: {e}"
