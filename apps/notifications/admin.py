# ==========================================
# apps/notifications/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html

from .models import Notification, NotificationLog, EmailTemplate, NotificationStatus


class NotificationLogInline(admin.TabularInline):
    model = NotificationLog
    extra = 0
    fields = ['recipient_email', 'channel', 'status', 'sent_at', 'error_message']
    readonly_fields = fields
    can_delete = False


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """Admin interface for bulk notifications."""

    list_display = [
        'subject',
        'target_type',
        'channel',
        'status_badge',
        'recipient_count',
        'created_by',
        'sent_at',
        'created_at',
    ]
    list_filter = ['status', 'target_type', 'channel', 'notification_type']
    search_fields = ['subject', 'body']
    readonly_fields = ['recipient_count', 'approved_by', 'approved_at', 'sent_at', 'created_at']
    raw_id_fields = ['target_group', 'target_trip', 'target_user', 'created_by']
    inlines = [NotificationLogInline]

    def status_badge(self, obj):
        colors = {
            NotificationStatus.DRAFT: '#6c757d',
            NotificationStatus.APPROVED: '#17a2b8',
            NotificationStatus.SENT: '#28a745',
            NotificationStatus.FAILED: '#dc3545',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px;">{}</span>',
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'


@admin.register(EmailTemplate)
class EmailTemplateAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'subject', 'updated_at']
    search_fields = ['id', 'name', 'subject']
    readonly_fields = ['updated_at']
