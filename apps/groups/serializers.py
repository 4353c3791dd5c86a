from rest_framework import serializers
from .models import Group
from apps.participants.models import Participant


class GroupSerializer(serializers.ModelSerializer):
    """Main serializer for groups."""

    participants_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'display_order',
            'is_selectable_by_parent',
            'participants_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class GroupCreateSerializer(serializers.Serializer):
    """Serializer for creating groups."""

    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    is_selectable_by_parent = serializers.BooleanField(required=False, default=True)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Name cannot be blank')
        return value


class GroupUpdateSerializer(serializers.Serializer):
    """Serializer for partial group updates."""

    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    display_order = serializers.IntegerField(min_value=0, required=False)
    is_selectable_by_parent = serializers.BooleanField(required=False)


class GroupRenameSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)


class GroupParticipantSerializer(serializers.ModelSerializer):
    """Child in a group with parent contact data."""

    parent_name = serializers.CharField(source='parent.get_full_name', read_only=True)
    parent_email = serializers.EmailField(source='parent.email', read_only=True)
    parent_phone = serializers.CharField(source='parent.phone', read_only=True)

    class Meta:
        model = Participant
        fields = [
            'id',
            'first_name',
            'last_name',
            'birth_date',
            'parent_name',
            'parent_email',
            'parent_phone',
        ]
        read_only_fields = fields
