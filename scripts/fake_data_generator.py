import logging
import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from faker import Faker

from accounts.models import Pharmacist
from appointments.models import Appointment
from appointments.workflow import AppointmentWorkflow
from doctors.models import Department, Doctor
from doctors.seeding import seed_departments
from patients.models import LabReport, MedicalRecord, Patient
from payments.models import Payment
from payments.workflow import PaymentWorkflow
from prescriptions.workflow import PrescriptionWorkflow

fake = Faker()
User = get_user_model()
logger = logging.getLogger('scripts.fake_data_generator')

# -----------------------------
# Fake data generation settings
# -----------------------------
DOCTOR_COUNT = 8
PATIENT_COUNT = 30
PHARMACIST_COUNT = 2
APPOINTMENTS_PER_PATIENT = 3
PASSWORD = 'password123'

SPECIALIZATIONS = {
    'Cardiology': 'Cardiologist',
    'Neurology': 'Neurologist',
    'Orthopedics': 'Orthopedic Surgeon',
    'Pediatrics': 'Pediatrician',
    'Dermatology': 'Dermatologist',
    'General Medicine': 'General Physician',
}
MEDICINES = [
    ('Amoxicillin', '500mg'), ('Paracetamol', '650mg'), ('Ibuprofen', '400mg'),
    ('Metformin', '500mg'), ('Atorvastatin', '20mg'), ('Cetirizine', '10mg'),
]
LAB_TESTS = ['Complete Blood Count', 'Lipid Profile', 'Blood Sugar (Fasting)', 'Thyroid Panel', 'Urinalysis']


def create_user(role, name=None):
    name = name or fake.name()
    email = fake.unique.email()
    return User.objects.create_user(username=email, email=email, password=PASSWORD, name=name, role=role)


def create_admin():
    email = 'admin@hospital.test'
    if User.objects.filter(email=email).exists():
        return User.objects.get(email=email)
    return User.objects.create_user(username=email, email=email, password=PASSWORD, name='Hospital Admin',
                                    role=User.ADMIN, is_staff=True)


def create_doctors():
    departments = {d.name: d for d in Department.objects.filter(name__in=SPECIALIZATIONS)}
    doctors = []
    for _ in range(DOCTOR_COUNT):
        department_name = random.choice(list(SPECIALIZATIONS))
        doctor = Doctor.objects.create(
            user=create_user(User.DOCTOR, f"Dr. {fake.name()}"),
            specialization=SPECIALIZATIONS[department_name],
            department=departments.get(department_name),
            fee=Decimal(random.choice([300, 500, 750, 1000])),
            schedule={day: {'start': '09:00', 'end': '17:00'}
                      for day in ('monday', 'tuesday', 'wednesday', 'thursday', 'friday')},
        )
        doctors.append(doctor)
    logger.info(f"{len(doctors)} doctors created")
    return doctors


def create_patients():
    patients = []
    for _ in range(PATIENT_COUNT):
        patient = Patient.objects.create(
            user=create_user(User.PATIENT),
            age=random.randint(1, 90),
            gender=random.choice(['Male', 'Female']),
            blood_group=random.choice(['A+', 'A-', 'B+', 'B-', 'O+', 'O-', 'AB+', 'AB-']),
            phone=fake.phone_number(),
            address=fake.address().replace('\n', ', '),
            medical_history=[{'condition': fake.word().title(), 'date': str(fake.past_date()), 'notes': ''}],
            emergency_contact={'name': fake.name(), 'relationship': 'Spouse', 'phone': fake.phone_number()},
        )
        patients.append(patient)
    logger.info(f"{len(patients)} patients created")
    return patients


def create_pharmacists():
    for _ in range(PHARMACIST_COUNT):
        Pharmacist.objects.create(
            user=create_user(User.PHARMACIST),
            license_number=f"PH-{fake.unique.random_int(10000, 99999)}",
            phone=fake.phone_number(),
        )
    logger.info(f"{PHARMACIST_COUNT} pharmacists created")


def create_clinical_history(patients, doctors):
    """
    Appointments spread over the last month and the coming week,
    with prescriptions, records, lab reports and payments for the past ones.
    """
    appointments = AppointmentWorkflow(notifier=lambda *args, **kwargs: None)
    prescriptions = PrescriptionWorkflow(appointment_workflow=appointments)
    payments = PaymentWorkflow()
    today = timezone.localdate()
    count = 0

    for patient in patients:
        for _ in range(APPOINTMENTS_PER_PATIENT):
            doctor = random.choice(doctors)
            day = today + timedelta(days=random.randint(-30, 7))
            appointment = appointments.create(
                patient_id=patient.pk,
                doctor_id=doctor.pk,
                time=f"{random.randint(9, 16):02d}:{random.choice(['00', '30'])}",
                date=day,
                is_urgent=random.random() < 0.1,
                reason=fake.sentence(nb_words=6),
            )
            count += 1
            if day >= today:
                continue

            diagnosis = fake.word().title()
            if random.random() < 0.8:
                name, dosage = random.choice(MEDICINES)
                prescriptions.create(
                    doctor=doctor,
                    appointment_id=appointment.pk,
                    diagnosis=diagnosis,
                    medicines=[{'name': name, 'dosage': dosage, 'frequency': 'Twice a day', 'duration': '5 days'}],
                    instructions='After meals',
                )
            else:
                appointments.update(appointment, status=random.choice([Appointment.CONFIRMED, Appointment.CANCELLED]))

            MedicalRecord.objects.create(patient=patient, doctor=doctor, appointment=appointment,
                                         diagnosis=diagnosis, treatment=fake.sentence())
            if random.random() < 0.3:
                LabReport.objects.create(patient=patient, doctor=doctor, test_name=random.choice(LAB_TESTS))

            payment = payments.create(patient_id=patient.pk, appointment_id=appointment.pk,
                                      amount=doctor.fee, method=random.choice(['Cash', 'Card', 'Insurance']))
            payments.set_status(payment, random.choice([Payment.PAID, Payment.PAID, Payment.PENDING, Payment.FAILED]))

    logger.info(f"{count} appointments created")


def run():
    logger.info("Starting hospital demo data generation")
    result = seed_departments()
    logger.info(f"Departments: {result['inserted']} inserted, {result['total']} total")

    with transaction.atomic():
        admin = create_admin()
        doctors = create_doctors()
        patients = create_patients()
        create_pharmacists()
        create_clinical_history(patients, doctors)

    logger.info(f"Demo data ready. Admin login: {admin.email} / {PASSWORD}")


run()

# python3 manage.py shell < scripts/fake_data_generator.py
