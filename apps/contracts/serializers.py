from rest_framework import serializers

from .models import TripContract


# =============================================================================
# Input Serializers
# =============================================================================

class ContractTemplateInputSerializer(serializers.Serializer):
    template_text = serializers.CharField(max_length=100000, trim_whitespace=False)


class ContractPreviewInputSerializer(serializers.Serializer):
    """Optional unsaved text to preview instead of the stored template."""

    template_text = serializers.CharField(
        required=False,
        allow_blank=False,
        max_length=100000,
        trim_whitespace=False,
    )


class ContractFilterSerializer(serializers.Serializer):
    trip_id = serializers.UUIDField(required=False)
    accepted = serializers.BooleanField(required=False, allow_null=True, default=None)


class ContractBulkDeleteSerializer(serializers.Serializer):
    contract_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=True,
        max_length=500,
    )


# =============================================================================
# Output Serializers
# =============================================================================

class ContractTemplateSerializer(serializers.Serializer):
    trip_id = serializers.UUIDField()
    template_text = serializers.CharField()
    is_active = serializers.BooleanField()
    activated_at = serializers.DateTimeField(allow_null=True)
    is_default = serializers.BooleanField()


class ContractPreviewSerializer(serializers.Serializer):
    contract_text = serializers.CharField()


class ContractListSerializer(serializers.ModelSerializer):
    """Contract row without the full text."""

    trip_title = serializers.CharField(source='trip.title', read_only=True)
    trip_departure = serializers.DateTimeField(source='trip.departure_datetime', read_only=True)
    participant_name = serializers.CharField(source='participant.full_name', read_only=True)
    parent_email = serializers.EmailField(source='participant.parent.email', read_only=True)
    is_accepted = serializers.BooleanField(read_only=True)

    class Meta:
        model = TripContract
        fields = [
            'id',
            'contract_number',
            'trip',
            'trip_title',
            'trip_departure',
            'participant',
            'participant_name',
            'parent_email',
            'is_accepted',
            'accepted_at',
            'accepted_name',
            'created_at',
        ]
        read_only_fields = fields


class ContractSerializer(ContractListSerializer):
    """Contract with its frozen text."""

    class Meta(ContractListSerializer.Meta):
        fields = ContractListSerializer.Meta.fields + ['registration', 'contract_text']
        read_only_fields = fields
