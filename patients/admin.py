from django.contrib import admin
from .models import Patient, MedicalRecord, LabReport


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'age', 'gender', 'blood_group', 'status', 'created_at')
    list_filter = ('status', 'gender', 'blood_group')
    search_fields = ('user__name', 'user__email', 'phone')
    ordering = ('-created_at',)


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'diagnosis', 'date')
    search_fields = ('diagnosis', 'patient__user__name')


@admin.register(LabReport)
class LabReportAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'test_name', 'status', 'date')
    list_filter = ('status',)
    search_fields = ('test_name', 'patient__user__name')
