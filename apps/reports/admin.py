from django.contrib import admin
from .models import Report


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ['type', 'reporter_id', 'reported_user_id', 'status', 'created_at', 'resolved_at']
    list_filter = ['status', 'type']
    search_fields = ['reason', 'admin_notes']
    readonly_fields = ['id', 'created_at', 'updated_at']
