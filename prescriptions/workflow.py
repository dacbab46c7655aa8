import logging

from django.db import transaction

from appointments.models import Appointment
from appointments.workflow import AppointmentWorkflow
from HospitalBackend.exceptions import InvalidInput, NotFound, Unauthorized
from HospitalBackend.workflow import StatusMachine
from .models import Prescription

logger = logging.getLogger(__name__)

PRESCRIPTION_STATUS = StatusMachine('prescription', {
    Prescription.PENDING: {Prescription.APPROVED, Prescription.REJECTED},
    Prescription.APPROVED: {Prescription.DISPENSED},
    Prescription.REJECTED: set(),
    Prescription.DISPENSED: set(),
})

DEFAULT_APPROVAL_NOTE = 'Approved by pharmacy'


class PrescriptionWorkflow:
    """
    Issuance by the treating doctor and adjudication by the pharmacy.
    """

    def __init__(self, prescriptions=None, appointments=None, appointment_workflow=None):
        self.prescriptions = prescriptions if prescriptions is not None else Prescription.objects
        self.appointments = appointments if appointments is not None else Appointment.objects
        self.appointment_workflow = appointment_workflow or AppointmentWorkflow(appointments=self.appointments)

    def get(self, prescription_id):
        try:
            return self.prescriptions.select_related('patient__user', 'doctor__user').get(pk=prescription_id)
        except Prescription.DoesNotExist:
            raise NotFound('Prescription not found')

    def create(self, doctor, appointment_id, patient_id=None, diagnosis='', medicines=None, instructions=''):
        """
        Issues a prescription and completes its appointment in one transaction.
        The prescribing doctor must be the appointment's doctor.
        """
        if doctor is None:
            raise NotFound('Doctor profile not found')
        if not appointment_id:
            raise InvalidInput('appointmentId is required')

        with transaction.atomic():
            try:
                appointment = self.appointments.select_for_update().get(pk=appointment_id)
            except Appointment.DoesNotExist:
                raise NotFound('Appointment not found')

            if appointment.doctor_id != doctor.pk:
                logger.warning(f"Doctor {doctor.pk} tried to prescribe for appointment {appointment.pk}")
                raise Unauthorized('Only the doctor of this appointment can prescribe for it')
            if patient_id is not None and int(patient_id) != appointment.patient_id:
                raise InvalidInput('patientId does not match the appointment')

            self.appointment_workflow.complete(appointment)
            prescription = self.prescriptions.create(
                patient_id=appointment.patient_id,
                doctor=doctor,
                appointment=appointment,
                diagnosis=diagnosis or '',
                medicines=medicines or [],
                instructions=instructions or '',
            )

        logger.info(f"Prescription {prescription.pk} issued by doctor {doctor.pk} "
                    f"for appointment {appointment.pk}")
        return prescription

    def update(self, prescription, doctor, **changes):
        """
        Edits diagnosis, medicines or instructions. Only the authoring doctor may do so.
        """
        if doctor is None or prescription.doctor_id != doctor.pk:
            logger.warning(f"Rejected edit of prescription {prescription.pk} by doctor "
                           f"{doctor.pk if doctor else None}")
            raise Unauthorized('Not authorized to update this prescription')

        fields = []
        for field in ('diagnosis', 'medicines', 'instructions'):
            if field in changes:
                setattr(prescription, field, changes[field])
                fields.append(field)
        if fields:
            prescription.save(update_fields=fields + ['updated_at'])
        return prescription

    def _move(self, prescription, target, notes=None):
        PRESCRIPTION_STATUS.ensure(prescription.status, target)
        logger.info(f"Prescription {prescription.pk}: {prescription.status} -> {target}")
        prescription.status = target
        fields = ['status', 'updated_at']
        if notes is not None:
            prescription.pharmacy_notes = notes
            fields.append('pharmacy_notes')
        prescription.save(update_fields=fields)
        return prescription

    def approve(self, prescription, notes=None):
        return self._move(prescription, Prescription.APPROVED, notes or DEFAULT_APPROVAL_NOTE)

    def reject(self, prescription, notes):
        if not notes or not str(notes).strip():
            raise InvalidInput('A rejection reason is required')
        return self._move(prescription, Prescription.REJECTED, notes)

    def dispense(self, prescription, notes=None):
        return self._move(prescription, Prescription.DISPENSED, notes)
