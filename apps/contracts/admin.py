# ==========================================
# apps/contracts/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html

from .models import TripContract, TripContractTemplate


@admin.register(TripContractTemplate)
class TripContractTemplateAdmin(admin.ModelAdmin):
    """Admin interface for trip contract templates."""

    list_display = ['trip', 'is_active', 'activated_at', 'activated_by', 'updated_at']
    list_filter = ['is_active']
    search_fields = ['trip__title']
    raw_id_fields = ['trip', 'activated_by', 'created_by']
    readonly_fields = ['activated_at', 'created_at', 'updated_at']


@admin.register(TripContract)
class TripContractAdmin(admin.ModelAdmin):
    """Admin interface for contracts. The text is frozen once created."""

    list_display = [
        'contract_number',
        'get_participant',
        'trip',
        'acceptance_badge',
        'created_at',
    ]
    list_filter = ['trip', 'created_at']
    search_fields = [
        'contract_number',
        'participant__first_name',
        'participant__last_name',
        'participant__parent__email',
    ]
    raw_id_fields = ['trip', 'participant', 'registration', 'accepted_by_parent', 'created_by']
    readonly_fields = [
        'contract_text',
        'contract_number',
        'accepted_at',
        'accepted_by_parent',
        'accepted_name',
        'created_at',
    ]

    def get_participant(self, obj):
        return obj.participant.full_name
    get_participant.short_description = 'Participant'
    get_participant.admin_order_field = 'participant__last_name'

    def acceptance_badge(self, obj):
        if obj.accepted_at:
            return format_html(
                '<span style="background-color: #28a745; color: white; padding: 3px 10px; '
                'border-radius: 3px;">{}</span>',
                f"Accepted ({obj.accepted_name})",
            )
        return format_html(
            '<span style="background-color: #ffc107; color: black; padding: 3px 10px; '
            'border-radius: 3px;">{}</span>',
            'Pending',
        )
    acceptance_badge.short_description = 'Acceptance'

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('trip', 'participant')
