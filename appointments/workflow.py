import logging
from datetime import datetime

from django.utils import timezone

from doctors.models import Doctor
from HospitalBackend.exceptions import InvalidInput, NotFound
from HospitalBackend.workflow import StatusMachine
from notifications.services import notify
from patients.models import Patient
from .models import Appointment

logger = logging.getLogger(__name__)

APPOINTMENT_STATUS = StatusMachine('appointment', {
    Appointment.PENDING: {Appointment.CONFIRMED, Appointment.CANCELLED},
    Appointment.CONFIRMED: {Appointment.COMPLETED, Appointment.CANCELLED},
    Appointment.COMPLETED: set(),
    Appointment.CANCELLED: set(),
})

TIME_FORMATS = ('%H:%M', '%I:%M %p', '%I:%M%p', '%H:%M:%S')


def normalize_time(value):
    """
    Parses '14:30', '2:30 PM' or '14:30:00' into '14:30'.
    Raises ValueError for anything else.
    """
    text = str(value).strip().upper()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime('%H:%M')
        except ValueError:
            continue
    raise ValueError(f"'{value}' is not a valid time")


class AppointmentWorkflow:
    """
    Booking, status changes and completion of appointments.

    Collaborators default to the ORM managers and the notification service,
    and can be swapped out by passing them in.
    """

    def __init__(self, appointments=None, patients=None, doctors=None, notifier=None):
        self.appointments = appointments if appointments is not None else Appointment.objects
        self.patients = patients if patients is not None else Patient.objects
        self.doctors = doctors if doctors is not None else Doctor.objects
        self.notify = notifier or notify

    def get(self, appointment_id):
        try:
            return self.appointments.select_related('patient__user', 'doctor__user').get(pk=appointment_id)
        except Appointment.DoesNotExist:
            raise NotFound('Appointment not found')

    def create(self, patient_id, doctor_id, time, date=None, is_urgent=False, reason='', status=None):
        if not time:
            raise InvalidInput('time is required')
        try:
            patient = self.patients.select_related('user').get(pk=patient_id)
        except self.patients.model.DoesNotExist:
            raise NotFound('Patient not found')
        try:
            doctor = self.doctors.select_related('user').get(pk=doctor_id)
        except self.doctors.model.DoesNotExist:
            raise NotFound('Doctor not found')

        status = status or Appointment.PENDING
        if status not in APPOINTMENT_STATUS.states:
            raise InvalidInput(f"'{status}' is not a valid appointment status")

        appointment = self.appointments.create(
            patient=patient,
            doctor=doctor,
            date=date or timezone.localdate(),
            time=time,
            status=status,
            is_urgent=is_urgent,
            reason=reason or '',
        )
        logger.info(f"Appointment {appointment.pk} booked: patient {patient.pk} with doctor {doctor.pk}")

        self.notify(
            doctor.user,
            title='Urgent appointment' if is_urgent else 'New appointment',
            message=f"{patient.user.name} booked an appointment on {appointment.date} at {appointment.time}.",
            type='Urgent' if is_urgent else 'Appointment',
            link=f"/appointments/{appointment.pk}",
        )
        return appointment

    def update(self, appointment, status=None, consultation_notes=None, diagnosis=None):
        """
        Applies only the supplied fields. A status change must follow the transition table.
        """
        fields = []
        if status is not None and status != appointment.status:
            APPOINTMENT_STATUS.ensure(appointment.status, status)
            logger.info(f"Appointment {appointment.pk}: {appointment.status} -> {status}")
            appointment.status = status
            fields.append('status')
        if consultation_notes is not None:
            appointment.consultation_notes = consultation_notes
            fields.append('consultation_notes')
        if diagnosis is not None:
            appointment.diagnosis = diagnosis
            fields.append('diagnosis')

        if fields:
            appointment.save(update_fields=fields + ['updated_at'])
        return appointment

    def complete(self, appointment):
        """
        Marks the appointment Completed once a prescription is issued for it.
        Any non-cancelled appointment can be completed; completed ones stay as they are.
        """
        if appointment.status == Appointment.CANCELLED:
            raise InvalidInput('Cannot prescribe for a cancelled appointment')
        if appointment.status != Appointment.COMPLETED:
            logger.info(f"Appointment {appointment.pk}: {appointment.status} -> {Appointment.COMPLETED}")
            appointment.status = Appointment.COMPLETED
            appointment.save(update_fields=['status', 'updated_at'])
        return appointment

    def delete(self, appointment):
        logger.info(f"Appointment {appointment.pk} deleted")
        appointment.delete()
