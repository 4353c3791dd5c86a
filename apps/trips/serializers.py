from rest_framework import serializers

from apps.groups.models import Group
from apps.payments.models import Payment

from .models import (
    Trip,
    TripPaymentTemplate,
    TripRegistration,
    TripStatus,
    PaymentType,
    ParticipationStatus,
)


# =============================================================================
# Payment templates
# =============================================================================

class PaymentTemplateSerializer(serializers.ModelSerializer):
    """Planned payment of a trip."""

    label = serializers.CharField(read_only=True)

    class Meta:
        model = TripPaymentTemplate
        fields = [
            'id',
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
            'label',
        ]
        read_only_fields = ['id', 'label']
        extra_kwargs = {
            'category_name': {'required': False, 'allow_blank': True},
        }

    def validate(self, attrs):
        payment_type = attrs.get('payment_type')
        if payment_type == PaymentType.INSTALLMENT and not attrs.get('installment_number'):
            raise serializers.ValidationError(
                {'installment_number': 'Installments require a number.'}
            )
        if payment_type == PaymentType.SEASON_PASS:
            year_from = attrs.get('birth_year_from')
            year_to = attrs.get('birth_year_to')
            if year_from is None or year_to is None:
                raise serializers.ValidationError(
                    {'birth_year_from': 'Season passes require a birth year range.'}
                )
            if year_from > year_to:
                raise serializers.ValidationError(
                    {'birth_year_to': 'birth_year_to must not be earlier than birth_year_from.'}
                )
        return attrs


# =============================================================================
# Trips
# =============================================================================

class TripGroupSerializer(serializers.ModelSerializer):
    class Meta:
        model = Group
        fields = ['id', 'name']


class TripSerializer(serializers.ModelSerializer):
    """Trip with groups and payment templates."""

    groups = serializers.SerializerMethodField()
    payment_templates = PaymentTemplateSerializer(many=True, read_only=True)

    class Meta:
        model = Trip
        fields = [
            'id',
            'title',
            'description',
            'location',
            'declaration_deadline',
            'departure_datetime',
            'departure_location',
            'departure_stop2_datetime',
            'departure_stop2_location',
            'return_datetime',
            'return_location',
            'return_stop2_datetime',
            'return_stop2_location',
            'bank_account_pln',
            'bank_account_eur',
            'status',
            'groups',
            'payment_templates',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_groups(self, obj):
        return [
            {'id': str(trip_group.group_id), 'name': trip_group.group.name}
            for trip_group in obj.trip_groups.all()
        ]


class TripInputSerializer(serializers.Serializer):
    """
    Validate trip create/update payloads.

    Fields:
        group_ids (list): At least one existing group
        payment_templates (list): At least one template, replaces existing ones
    """

    title = serializers.CharField(min_length=3, max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    location = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)
    declaration_deadline = serializers.DateField(required=False, allow_null=True, default=None)
    departure_datetime = serializers.DateTimeField()
    departure_location = serializers.CharField(max_length=200)
    departure_stop2_datetime = serializers.DateTimeField(required=False, allow_null=True, default=None)
    departure_stop2_location = serializers.CharField(
        required=False, allow_blank=True, default='', max_length=200
    )
    return_datetime = serializers.DateTimeField()
    return_location = serializers.CharField(max_length=200)
    return_stop2_datetime = serializers.DateTimeField(required=False, allow_null=True, default=None)
    return_stop2_location = serializers.CharField(
        required=False, allow_blank=True, default='', max_length=200
    )
    bank_account_pln = serializers.CharField(required=False, max_length=64)
    bank_account_eur = serializers.CharField(required=False, max_length=64)
    status = serializers.ChoiceField(choices=TripStatus.choices, required=False)
    group_ids = serializers.ListField(child=serializers.UUIDField(), min_length=1)
    payment_templates = PaymentTemplateSerializer(many=True)

    def validate_group_ids(self, value):
        groups = list(Group.objects.filter(id__in=value))
        if len(groups) != len(set(value)):
            raise serializers.ValidationError('One or more groups do not exist.')
        return groups

    def validate_payment_templates(self, value):
        if not value:
            raise serializers.ValidationError('At least one payment template is required.')
        return value

    def validate(self, attrs):
        if attrs['return_datetime'] <= attrs['departure_datetime']:
            raise serializers.ValidationError(
                {'return_datetime': 'Return must be later than departure.'}
            )
        return attrs


class TripStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TripStatus.choices)


class TripInfoEmailSerializer(serializers.Serializer):
    """Optional admin-edited subject and body; both empty means per-parent rendering."""

    subject = serializers.CharField(required=False, allow_blank=True, max_length=255)
    body_html = serializers.CharField(required=False, allow_blank=True)


class TripEmailPreviewSerializer(serializers.Serializer):
    subject = serializers.CharField()
    html = serializers.CharField()


class TripParseSerializer(serializers.Serializer):
    text = serializers.CharField(min_length=10, max_length=10000)


# =============================================================================
# Registrations
# =============================================================================

class RegisterParticipantSerializer(serializers.Serializer):
    participant_id = serializers.UUIDField()


class ParticipationSerializer(serializers.Serializer):
    participant_id = serializers.UUIDField()
    participation_status = serializers.ChoiceField(choices=ParticipationStatus.choices)
    note = serializers.CharField(required=False, allow_blank=True, max_length=1000, default='')


class RegistrationPaymentSerializer(serializers.ModelSerializer):
    label = serializers.CharField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'label',
            'payment_type',
            'amount',
            'amount_paid',
            'currency',
            'due_date',
            'status',
        ]
        read_only_fields = fields


class RegistrationSerializer(serializers.ModelSerializer):
    """Registration of a child on a trip."""

    participant_name = serializers.CharField(source='participant.full_name', read_only=True)
    trip_title = serializers.CharField(source='trip.title', read_only=True)

    class Meta:
        model = TripRegistration
        fields = [
            'id',
            'trip',
            'trip_title',
            'participant',
            'participant_name',
            'registration_type',
            'is_outside_group',
            'status',
            'participation_status',
            'participation_note',
            'created_at',
        ]
        read_only_fields = fields


class TripParticipantSerializer(serializers.Serializer):
    """Child of a trip's groups merged with its registration and payments."""

    participant_id = serializers.UUIDField(source='participant.id')
    first_name = serializers.CharField(source='participant.first_name')
    last_name = serializers.CharField(source='participant.last_name')
    birth_date = serializers.DateField(source='participant.birth_date')
    group_name = serializers.SerializerMethodField()
    parent_name = serializers.CharField(source='participant.parent.get_full_name')
    parent_email = serializers.EmailField(source='participant.parent.email')
    parent_phone = serializers.CharField(source='participant.parent.phone')
    registration = serializers.SerializerMethodField()
    payments = serializers.SerializerMethodField()

    def get_group_name(self, obj):
        group = obj['participant'].group
        return group.name if group else None

    def get_registration(self, obj):
        registration = obj['registration']
        return RegistrationSerializer(registration).data if registration else None

    def get_payments(self, obj):
        registration = obj['registration']
        if registration is None:
            return []
        return RegistrationPaymentSerializer(registration.payments.all(), many=True).data


class ParentTripChildSerializer(serializers.Serializer):
    participant_id = serializers.UUIDField()
    participant_name = serializers.CharField()
    registration_id = serializers.UUIDField(allow_null=True)
    participation_status = serializers.CharField()
    participation_note = serializers.CharField(allow_blank=True)


class ParentTripSerializer(serializers.Serializer):
    """Published trip with the participation of each eligible child."""

    trip = TripSerializer()
    children = ParentTripChildSerializer(many=True)
