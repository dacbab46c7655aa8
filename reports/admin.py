from django.contrib import admin
from .models import ReportGeneration


@admin.register(ReportGeneration)
class ReportGenerationAdmin(admin.ModelAdmin):
    list_display = ('id', 'report_type', 'status', 'generated_by', 'created_at', 'file_path')
    list_filter = ('report_type', 'status', 'created_at')
    search_fields = ('generated_by__email',)
