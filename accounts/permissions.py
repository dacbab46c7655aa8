from rest_framework import permissions

from .models import User


class HasRole(permissions.BasePermission):
    """
    Allows access only to authenticated users whose role is in allowed_roles.
    """
    allowed_roles = ()

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated
                    and getattr(request.user, 'role', None) in self.allowed_roles)


class IsAdmin(HasRole):
    allowed_roles = (User.ADMIN,)


class IsDoctor(HasRole):
    allowed_roles = (User.DOCTOR,)


class IsPharmacist(HasRole):
    allowed_roles = (User.PHARMACIST,)


class IsAdminOrDoctor(HasRole):
    allowed_roles = (User.ADMIN, User.DOCTOR)


class IsAdminOrPharmacist(HasRole):
    allowed_roles = (User.ADMIN, User.PHARMACIST)


class IsAdminOrDoctorOrPatient(HasRole):
    allowed_roles = (User.ADMIN, User.DOCTOR, User.PATIENT)


# Profile lookups. Reverse one-to-one access raises a subclass of
# AttributeError when the profile is missing, so getattr() can default it.

def doctor_profile(user):
    return getattr(user, 'doctor_profile', None)


def patient_profile(user):
    return getattr(user, 'patient_profile', None)


def pharmacist_profile(user):
    return getattr(user, 'pharmacist_profile', None)


def is_admin(user):
    return getattr(user, 'role', None) == User.ADMIN


def can_view_patient(user, patient):
    """
    Admin sees every patient, a patient only themself,
    a doctor only patients they have an appointment with.
    """
    role = getattr(user, 'role', None)
    if role == User.ADMIN:
        return True
    if role == User.PATIENT:
        profile = patient_profile(user)
        return profile is not None and profile.pk == patient.pk
    if role == User.DOCTOR:
        profile = doctor_profile(user)
        return profile is not None and patient.appointments.filter(doctor=profile).exists()
    return False


def can_view_doctor(user, doctor):
    if is_admin(user):
        return True
    profile = doctor_profile(user)
    return profile is not None and profile.pk == doctor.pk
