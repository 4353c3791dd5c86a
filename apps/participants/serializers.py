from django.utils import timezone

from rest_framework import serializers
from .models import Participant, CustomFieldDefinition

MAX_PARTICIPANT_AGE_YEARS = 25


def validate_birth_date(value):
    today = timezone.localdate()
    if value > today:
        raise serializers.ValidationError('Birth date cannot be in the future')
    try:
        oldest = today.replace(year=today.year - MAX_PARTICIPANT_AGE_YEARS)
    except ValueError:
        # 29 February
        oldest = today.replace(year=today.year - MAX_PARTICIPANT_AGE_YEARS, day=28)
    if value < oldest:
        raise serializers.ValidationError(
            f'Participant cannot be older than {MAX_PARTICIPANT_AGE_YEARS} years'
        )
    return value


# =============================================================================
# Input Serializers
# =============================================================================

class ParticipantInputSerializer(serializers.Serializer):
    """
    Validate child create/update payloads.

    Fields:
        group_id (UUID): Optional group, null clears the assignment on update
        custom_fields (dict): Optional map of extra values, replaces existing ones
    """

    first_name = serializers.CharField(min_length=2, max_length=50)
    last_name = serializers.CharField(min_length=2, max_length=50)
    birth_date = serializers.DateField(validators=[validate_birth_date])
    height_cm = serializers.IntegerField(min_value=1, max_value=250, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    group_id = serializers.UUIDField(required=False, allow_null=True)
    custom_fields = serializers.DictField(required=False)


class ParticipantBulkDeleteSerializer(serializers.Serializer):
    participant_ids = serializers.ListField(child=serializers.UUIDField(), min_length=1)


class AssignGroupSerializer(serializers.Serializer):
    group_id = serializers.UUIDField(allow_null=True)


class ParticipantNoteSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_blank=True, max_length=2000)


# =============================================================================
# Output Serializers
# =============================================================================

class ParticipantSerializer(serializers.ModelSerializer):
    """Child with group and extra fields."""

    group_id = serializers.SerializerMethodField()
    group_name = serializers.SerializerMethodField()
    parent_email = serializers.EmailField(source='parent.email', read_only=True)
    custom_fields = serializers.SerializerMethodField()

    class Meta:
        model = Participant
        fields = [
            'id',
            'first_name',
            'last_name',
            'birth_date',
            'height_cm',
            'notes',
            'parent',
            'parent_email',
            'group_id',
            'group_name',
            'custom_fields',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_group_id(self, obj):
        group = obj.group
        return str(group.id) if group else None

    def get_group_name(self, obj):
        group = obj.group
        return group.name if group else None

    def get_custom_fields(self, obj):
        return {field.field_name: field.field_value for field in obj.custom_fields.all()}


class ParticipantRegistrationSerializer(serializers.Serializer):
    """Active registration of a child with its trip."""

    id = serializers.UUIDField()
    trip_id = serializers.UUIDField()
    trip_title = serializers.CharField(source='trip.title')
    departure_datetime = serializers.DateTimeField(source='trip.departure_datetime')
    return_datetime = serializers.DateTimeField(source='trip.return_datetime')
    participation_status = serializers.CharField()
    registration_type = serializers.CharField()


class CustomFieldDefinitionSerializer(serializers.ModelSerializer):

    class Meta:
        model = CustomFieldDefinition
        fields = [
            'id',
            'field_name',
            'field_label',
            'field_type',
            'options',
            'is_required',
            'display_order',
        ]
        read_only_fields = ['id']
