from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'amount', 'status', 'method', 'transaction_id', 'date')
    list_filter = ('status', 'method')
    search_fields = ('transaction_id', 'patient__user__name')
