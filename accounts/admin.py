from django.contrib import admin
from .models import User, Pharmacist


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('id', 'email', 'name', 'role', 'is_online', 'last_login')
    list_filter = ('role', 'is_online')
    search_fields = ('email', 'name')


@admin.register(Pharmacist)
class PharmacistAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'license_number', 'status')
    list_filter = ('status',)
    search_fields = ('user__name', 'license_number')
