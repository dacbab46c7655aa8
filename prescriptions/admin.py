from django.contrib import admin
from .models import Prescription


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'appointment', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('diagnosis', 'patient__user__name', 'doctor__user__name')
