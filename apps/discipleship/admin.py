"""Admin configuration for discipleship models."""
from django.contrib import admin

from .models import Plan, Stage, ProgressRecord


# ─── Plans ──────────────────────────────────────────────────────────────────


class StageInline(admin.TabularInline):
    model = Stage
    extra = 1
    ordering = ['order', 'created_at']
    fields = ['order', 'name', 'estimated_days', 'key_verses']


@admin.register(Plan)
class PlanAdmin(admin.ModelAdmin):
    list_display = ['name', 'leader', 'maturity_level', 'estimated_days', 'is_active', 'created_at']
    list_filter = ['maturity_level', 'is_active']
    search_fields = ['name', 'leader__name']
    inlines = [StageInline]


@admin.register(Stage)
class StageAdmin(admin.ModelAdmin):
    list_display = ['name', 'plan', 'order', 'estimated_days']
    list_filter = ['plan']
    ordering = ['plan', 'order', 'created_at']
    search_fields = ['name']


# ─── Progress ───────────────────────────────────────────────────────────────


@admin.register(ProgressRecord)
class ProgressRecordAdmin(admin.ModelAdmin):
    list_display = ['disciple', 'plan', 'stage', 'status', 'started_at', 'completed_at', 'version']
    list_filter = ['status', 'plan']
    search_fields = ['disciple__name', 'plan__name', 'stage__name']
    readonly_fields = ['version', 'started_at', 'completed_at']
