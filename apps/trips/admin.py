# ==========================================
# apps/trips/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Trip,
    TripGroup,
    TripPaymentTemplate,
    TripRegistration,
    TripStatus,
    ParticipationStatus,
)


class TripGroupInline(admin.TabularInline):
    model = TripGroup
    extra = 0
    autocomplete_fields = ['group']


class TripPaymentTemplateInline(admin.TabularInline):
    model = TripPaymentTemplate
    extra = 0
    fields = [
        'payment_type',
        'installment_number',
        'is_first_installment',
        'includes_season_pass',
        'category_name',
        'birth_year_from',
        'birth_year_to',
        'amount',
        'currency',
        'due_date',
        'payment_method',
    ]


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    """Admin interface for trips."""

    list_display = [
        'title',
        'departure_datetime',
        'return_datetime',
        'status_badge',
        'registration_count',
        'created_at',
    ]
    list_filter = ['status', 'departure_datetime']
    search_fields = ['title', 'description', 'location']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [TripGroupInline, TripPaymentTemplateInline]
    date_hierarchy = 'departure_datetime'
    actions = ['publish_trips', 'mark_completed']

    fieldsets = (
        ('Basic Information', {
            'fields': ('title', 'description', 'location', 'status', 'declaration_deadline')
        }),
        ('Departure', {
            'fields': (
                'departure_datetime', 'departure_location',
                'departure_stop2_datetime', 'departure_stop2_location',
            )
        }),
        ('Return', {
            'fields': (
                'return_datetime', 'return_location',
                'return_stop2_datetime', 'return_stop2_location',
            )
        }),
        ('Bank accounts', {
            'fields': ('bank_account_pln', 'bank_account_eur'),
            'classes': ('collapse',)
        }),
        ('Metadata', {
            'fields': ('created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def status_badge(self, obj):
        colors = {
            TripStatus.DRAFT: '#6c757d',
            TripStatus.PUBLISHED: '#28a745',
            TripStatus.CANCELLED: '#dc3545',
            TripStatus.COMPLETED: '#17a2b8',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px;">{}</span>',
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'

    def registration_count(self, obj):
        return obj.registrations.filter(participation_status=ParticipationStatus.CONFIRMED).count()
    registration_count.short_description = 'Confirmed'

    def publish_trips(self, request, queryset):
        updated = queryset.update(status=TripStatus.PUBLISHED)
        self.message_user(request, f'{updated} trip(s) published.')
    publish_trips.short_description = 'Publish selected trips'

    def mark_completed(self, request, queryset):
        updated = queryset.update(status=TripStatus.COMPLETED)
        self.message_user(request, f'{updated} trip(s) marked as completed.')
    mark_completed.short_description = 'Mark selected trips as completed'


@admin.register(TripRegistration)
class TripRegistrationAdmin(admin.ModelAdmin):
    list_display = [
        'participant',
        'trip',
        'registration_type',
        'status',
        'participation_status',
        'is_outside_group',
        'created_at',
    ]
    list_filter = ['status', 'participation_status', 'registration_type', 'is_outside_group']
    search_fields = ['participant__first_name', 'participant__last_name', 'trip__title']
    raw_id_fields = ['trip', 'participant', 'registered_by']
    readonly_fields = ['created_at', 'updated_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('trip', 'participant')
