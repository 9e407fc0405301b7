"""Admin configuration for alerts."""
from django.contrib import admin

from .models import Alert


@admin.register(Alert)
class AlertAdmin(admin.ModelAdmin):
    list_display = ['title', 'leader', 'disciple', 'alert_type', 'alert_date', 'is_read', 'is_active']
    list_filter = ['alert_type', 'is_read', 'is_active']
    search_fields = ['title', 'message', 'leader__name', 'disciple__name']
