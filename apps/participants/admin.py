# ==========================================
# apps/participants/admin.py
# ==========================================

from django.contrib import admin
from .models import Participant, ParticipantCustomField, CustomFieldDefinition


class ParticipantCustomFieldInline(admin.TabularInline):
    model = ParticipantCustomField
    extra = 0
    fields = ['field_name', 'field_value']


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    """Admin interface for children."""

    list_display = [
        'last_name',
        'first_name',
        'birth_date',
        'get_group_name',
        'parent',
        'created_at',
    ]
    list_filter = ['group_assignment__group', 'created_at']
    search_fields = ['first_name', 'last_name', 'parent__email', 'parent__last_name']
    readonly_fields = ['created_at', 'updated_at']
    autocomplete_fields = ['parent']
    inlines = [ParticipantCustomFieldInline]
    ordering = ['last_name', 'first_name']

    def get_group_name(self, obj):
        group = obj.group
        return group.name if group else '-'
    get_group_name.short_description = 'Group'

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('parent', 'group_assignment__group')


@admin.register(CustomFieldDefinition)
class CustomFieldDefinitionAdmin(admin.ModelAdmin):
    list_display = ['field_label', 'field_name', 'field_type', 'is_required', 'display_order']
    list_editable = ['display_order']
    list_filter = ['field_type', 'is_required']
    search_fields = ['field_name', 'field_label']
