import logging

from .models import Department

logger = logging.getLogger(__name__)

DEPARTMENT_CATALOG = (
    ('Cardiology', 'Heart and cardiovascular system'),
    ('Neurology', 'Brain, spinal cord and nervous system disorders'),
    ('Orthopedics', 'Bones, joints, ligaments and muscles'),
    ('Pediatrics', 'Medical care of infants, children and adolescents'),
    ('Dermatology', 'Skin, hair and nail conditions'),
    ('Gastroenterology', 'Digestive system and liver'),
    ('General Medicine', 'Primary diagnosis and non-surgical treatment'),
    ('Radiology', 'Medical imaging and image-guided procedures'),
    ('Oncology', 'Diagnosis and treatment of cancer'),
    ('Psychiatry', 'Mental health and behavioural disorders'),
    ('Ophthalmology', 'Eye care and vision'),
    ('ENT', 'Ear, nose and throat'),
    ('Gynecology', 'Female reproductive health'),
    ('Urology', 'Urinary tract and male reproductive organs'),
    ('Nephrology', 'Kidney function and disease'),
    ('Emergency Medicine', 'Acute care and trauma'),
)


def seed_departments():
    """
    Inserts the standard department catalog, skipping names that already exist.

    Safe to call on every boot: rows colliding with the unique name index are
    ignored by the database instead of aborting the batch. Returns the number
    of newly inserted departments and the resulting total.
    """
    before = Department.objects.count()
    Department.objects.bulk_create(
        [Department(name=name, description=description) for name, description in DEPARTMENT_CATALOG],
        ignore_conflicts=True,
    )
    total = Department.objects.count()
    inserted = total - before
    logger.info(f"Department seeding inserted {inserted}, total {total}")
    return {'inserted': inserted, 'total': total}
