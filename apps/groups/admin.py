# ==========================================
# apps/groups/admin.py
# ==========================================

from django.contrib import admin
from apps.groups.models import Group, ParticipantGroup


class ParticipantGroupInline(admin.TabularInline):
    """Inline admin for child assignments."""
    model = ParticipantGroup
    extra = 0
    fields = ['participant', 'assigned_by', 'assigned_at']
    readonly_fields = ['assigned_at']
    autocomplete_fields = ['participant']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin interface for Groups."""

    list_display = [
        'name',
        'display_order',
        'participant_count',
        'is_selectable_by_parent',
        'created_at'
    ]
    list_editable = ['display_order', 'is_selectable_by_parent']
    list_filter = ['is_selectable_by_parent']
    search_fields = ['name', 'description']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ParticipantGroupInline]
    ordering = ['display_order', 'name']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'display_order', 'is_selectable_by_parent')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def participant_count(self, obj):
        """Show number of assigned children."""
        return obj.assignments.count()
    participant_count.short_description = 'Participants'
