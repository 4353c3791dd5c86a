from rest_framework import serializers

from .models import (
    Notification,
    NotificationLog,
    EmailTemplate,
    NotificationType,
    TargetType,
    Channel,
)


class NotificationSerializer(serializers.ModelSerializer):
    """Main serializer for notifications."""

    target_group_name = serializers.CharField(source='target_group.name', read_only=True, default=None)
    target_trip_title = serializers.CharField(source='target_trip.title', read_only=True, default=None)
    target_user_email = serializers.EmailField(source='target_user.email', read_only=True, default=None)
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True, default=None)

    class Meta:
        model = Notification
        fields = [
            'id',
            'notification_type',
            'target_type',
            'target_group',
            'target_group_name',
            'target_trip',
            'target_trip_title',
            'target_user',
            'target_user_email',
            'subject',
            'body',
            'channel',
            'status',
            'recipient_count',
            'created_by_email',
            'approved_by',
            'approved_at',
            'sent_at',
            'created_at',
        ]
        read_only_fields = fields


class NotificationCreateSerializer(serializers.Serializer):
    """Serializer for drafting a notification."""

    notification_type = serializers.ChoiceField(
        choices=NotificationType.choices,
        default=NotificationType.CUSTOM
    )
    target_type = serializers.ChoiceField(choices=TargetType.choices)
    target_group_id = serializers.UUIDField(required=False, allow_null=True)
    target_trip_id = serializers.UUIDField(required=False, allow_null=True)
    target_user_id = serializers.UUIDField(required=False, allow_null=True)
    subject = serializers.CharField(min_length=3, max_length=200)
    body = serializers.CharField(min_length=10, max_length=5000)
    channel = serializers.ChoiceField(choices=Channel.choices, default=Channel.EMAIL)

    def validate(self, attrs):
        required = {
            TargetType.GROUP: 'target_group_id',
            TargetType.TRIP: 'target_trip_id',
            TargetType.INDIVIDUAL: 'target_user_id',
        }
        field = required.get(attrs['target_type'])
        if field and not attrs.get(field):
            raise serializers.ValidationError({field: 'This field is required for the selected target.'})
        return attrs


class NotificationLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationLog
        fields = [
            'id',
            'recipient',
            'recipient_email',
            'channel',
            'status',
            'sent_at',
            'error_message',
        ]
        read_only_fields = fields


class SendResultSerializer(serializers.Serializer):
    sent_count = serializers.IntegerField()
    failed_count = serializers.IntegerField()


class EmailTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailTemplate
        fields = ['id', 'name', 'subject', 'body_html', 'variables', 'updated_at']
        read_only_fields = ['id', 'variables', 'updated_at']


class EmailTemplateUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    subject = serializers.CharField(max_length=255, required=False)
    body_html = serializers.CharField(required=False)
