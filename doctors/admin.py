from django.contrib import admin
from .models import Department, Doctor


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'head', 'status')
    list_filter = ('status',)
    search_fields = ('name',)


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'specialization', 'department', 'fee', 'available', 'status')
    list_filter = ('department', 'available', 'status')
    search_fields = ('user__name', 'user__email', 'specialization')
