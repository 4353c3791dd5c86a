# ==========================================
# apps/payments/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html

from .models import Payment, PaymentTransaction, PaymentStatus


class PaymentTransactionInline(admin.TabularInline):
    model = PaymentTransaction
    extra = 0
    fields = ['amount', 'currency', 'transaction_date', 'payment_method', 'notes', 'recorded_by']
    readonly_fields = ['recorded_by']


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Admin interface for payments."""

    list_display = [
        'get_participant',
        'get_trip',
        'label',
        'amount',
        'amount_paid',
        'currency',
        'due_date',
        'status_badge',
    ]
    list_filter = ['status', 'currency', 'payment_type', 'due_date']
    search_fields = [
        'registration__participant__first_name',
        'registration__participant__last_name',
        'registration__trip__title',
    ]
    raw_id_fields = ['registration', 'template', 'marked_by', 'discount_applied_by']
    readonly_fields = ['paid_at', 'discount_applied_at', 'reminder_sent_at', 'created_at', 'updated_at']
    inlines = [PaymentTransactionInline]
    date_hierarchy = 'due_date'
    actions = ['refresh_statuses']

    def get_participant(self, obj):
        return obj.registration.participant.full_name
    get_participant.short_description = 'Participant'
    get_participant.admin_order_field = 'registration__participant__last_name'

    def get_trip(self, obj):
        return obj.registration.trip.title
    get_trip.short_description = 'Trip'

    def status_badge(self, obj):
        colors = {
            PaymentStatus.PENDING: '#6c757d',
            PaymentStatus.PARTIALLY_PAID: '#17a2b8',
            PaymentStatus.PAID: '#28a745',
            PaymentStatus.OVERDUE: '#dc3545',
            PaymentStatus.PARTIALLY_PAID_OVERDUE: '#fd7e14',
            PaymentStatus.CANCELLED: '#343a40',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px;">{}</span>',
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'

    def refresh_statuses(self, request, queryset):
        changed = 0
        for payment in queryset:
            previous = payment.status
            if payment.refresh_status() != previous:
                payment.save(update_fields=['status', 'paid_at', 'updated_at'])
                changed += 1
        self.message_user(request, f'{changed} payment status(es) updated.')
    refresh_statuses.short_description = 'Re-derive status of selected payments'

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('registration__participant', 'registration__trip')
