"""Admin configuration for leaders and disciples."""
from django.contrib import admin

from .models import Leader, Disciple


class DiscipleInline(admin.TabularInline):
    model = Disciple
    extra = 0
    fields = ['name', 'status', 'spiritual_maturity', 'cell_group']
    fk_name = 'leader'


@admin.register(Leader)
class LeaderAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'leader_type', 'is_active', 'created_at']
    list_filter = ['leader_type', 'is_active']
    search_fields = ['name', 'email', 'user__username']
    inlines = [DiscipleInline]


@admin.register(Disciple)
class DiscipleAdmin(admin.ModelAdmin):
    list_display = ['name', 'leader', 'status', 'spiritual_maturity', 'city', 'last_contact_at']
    list_filter = ['status', 'spiritual_maturity']
    search_fields = ['name', 'contact', 'city', 'leader__name']
    raw_id_fields = ['user']
