"""Admin configuration for meetings and prayer requests."""
from django.contrib import admin

from .models import Meeting, PrayerRequest


@admin.register(Meeting)
class MeetingAdmin(admin.ModelAdmin):
    list_display = ['disciple', 'leader', 'meeting_date', 'topic']
    search_fields = ['topic', 'discussion_notes', 'disciple__name', 'leader__name']
    raw_id_fields = ['leader', 'disciple']
    date_hierarchy = 'meeting_date'


@admin.register(PrayerRequest)
class PrayerRequestAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'leader', 'disciple', 'urgency', 'status', 'requested_at', 'completed_at']
    list_filter = ['urgency', 'status', 'category']
    search_fields = ['request', 'testimony', 'disciple__name', 'leader__name']
    raw_id_fields = ['leader', 'disciple']
    readonly_fields = ['completed_at']
