from django.contrib import admin
from .models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'date', 'time', 'status', 'is_urgent')
    list_filter = ('status', 'is_urgent', 'date')
    search_fields = ('patient__user__name', 'doctor__user__name', 'reason')
    ordering = ('-date', '-time')
