from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.permissions import IsClubAdmin, IsParent

from .serializers import (
    TripSerializer,
    TripInputSerializer,
    TripStatusSerializer,
    TripInfoEmailSerializer,
    TripEmailPreviewSerializer,
    TripParseSerializer,
    RegisterParticipantSerializer,
    ParticipationSerializer,
    RegistrationSerializer,
    TripParticipantSerializer,
    ParentTripSerializer,
)

from apps.trips.services import (
    get_trip_by_id,
    list_trips_for_user,
    create_trip,
    update_trip,
    set_trip_status,
    delete_trip,
    duplicate_trip,
    get_trips_for_parent,
    register_participant,
    cancel_registration,
    set_participation_status,
    get_trip_participants,
    get_trip_email_preview,
    send_trip_info_email,
    parse_trip_description,
    # Exceptions
    TripsServiceError,
    TripNotFoundError,
    RegistrationNotFoundError,
    ParticipantAccessError,
    InvalidTripDescriptionError,
    TripParserConfigurationError,
    TripParserRateLimitError,
    TripParserUpstreamError,
)


class TripPagination(PageNumberPagination):
    """Custom pagination for trips."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _error_response(exc):
    """Map trip service errors to HTTP responses."""
    if isinstance(exc, (TripNotFoundError, RegistrationNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ParticipantAccessError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, TripParserRateLimitError):
        code = status.HTTP_429_TOO_MANY_REQUESTS
    elif isinstance(exc, TripParserUpstreamError):
        code = status.HTTP_502_BAD_GATEWAY
    elif isinstance(exc, TripParserConfigurationError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc)}, status=code)


def _split_trip_input(validated_data):
    data = dict(validated_data)
    groups = data.pop('group_ids')
    templates = [dict(template) for template in data.pop('payment_templates')]
    return groups, templates, data


class TripViewSet(viewsets.ViewSet):
    """
    Ski trips.

    Admins manage every trip, parents see published trips and register
    their children.

    list: Trips (parents: published only, admins: optional ?status=)
    create: Create a trip with groups and payment templates (admin)
    retrieve: Trip details
    update: Replace a trip with its groups and templates (admin)
    destroy: Delete a trip with everything attached (admin)
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-f-]{36}'

    ADMIN_ACTIONS = {
        'create', 'update', 'destroy', 'set_status', 'duplicate', 'participants',
        'email_preview', 'send_info_email', 'parse_description',
    }

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in self.ADMIN_ACTIONS:
            return [IsAuthenticated(), IsClubAdmin()]
        if self.action == 'for_parent':
            return [IsAuthenticated(), IsParent()]
        return [IsAuthenticated()]

    @extend_schema(
        parameters=[OpenApiParameter('status', str, description='Filter by status (admin)')],
        responses={200: TripSerializer(many=True)},
    )
    def list(self, request):
        trips = list_trips_for_user(user=request.user, status=request.query_params.get('status'))
        paginator = TripPagination()
        page = paginator.paginate_queryset(trips, request, view=self)
        return paginator.get_paginated_response(TripSerializer(page, many=True).data)

    @extend_schema(request=TripInputSerializer, responses={201: TripSerializer})
    def create(self, request):
        serializer = TripInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        groups, templates, fields = _split_trip_input(serializer.validated_data)
        trip = create_trip(created_by=request.user, groups=groups, payment_templates=templates, **fields)
        trip = get_trip_by_id(trip_id=trip.id)
        return Response(TripSerializer(trip).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: TripSerializer})
    def retrieve(self, request, pk=None):
        try:
            trip = get_trip_by_id(trip_id=pk, user=request.user)
        except TripsServiceError as e:
            return _error_response(e)
        return Response(TripSerializer(trip).data)

    @extend_schema(request=TripInputSerializer, responses={200: TripSerializer})
    def update(self, request, pk=None):
        serializer = TripInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        groups, templates, fields = _split_trip_input(serializer.validated_data)
        try:
            update_trip(trip_id=pk, groups=groups, payment_templates=templates, **fields)
            trip = get_trip_by_id(trip_id=pk)
        except TripsServiceError as e:
            return _error_response(e)
        return Response(TripSerializer(trip).data)

    def destroy(self, request, pk=None):
        try:
            delete_trip(trip_id=pk)
        except TripsServiceError as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=TripStatusSerializer, responses={200: TripSerializer})
    @action(detail=True, methods=['patch'], url_path='status')
    def set_status(self, request, pk=None):
        """Change the trip status (admin)."""
        serializer = TripStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            set_trip_status(trip_id=pk, status=serializer.validated_data['status'])
            trip = get_trip_by_id(trip_id=pk)
        except TripsServiceError as e:
            return _error_response(e)
        return Response(TripSerializer(trip).data)

    @extend_schema(request=None, responses={201: TripSerializer})
    @action(detail=True, methods=['post'])
    def duplicate(self, request, pk=None):
        """Copy the trip one year ahead as a draft (admin)."""
        try:
            copy = duplicate_trip(trip_id=pk, created_by=request.user)
            copy = get_trip_by_id(trip_id=copy.id)
        except TripsServiceError as e:
            return _error_response(e)
        return Response(TripSerializer(copy).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=RegisterParticipantSerializer, responses={201: RegistrationSerializer})
    @action(detail=True, methods=['post'])
    def register(self, request, pk=None):
        """Register a child on the trip."""
        serializer = RegisterParticipantSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            registration = register_participant(
                trip_id=pk,
                participant_id=serializer.validated_data['participant_id'],
                user=request.user,
            )
        except TripsServiceError as e:
            return _error_response(e)
        return Response(RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ParticipationSerializer, responses={200: RegistrationSerializer})
    @action(detail=True, methods=['post'])
    def participation(self, request, pk=None):
        """Confirm or decline a child's participation."""
        serializer = ParticipationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            registration = set_participation_status(
                trip_id=pk,
                user=request.user,
                **serializer.validated_data,
            )
        except TripsServiceError as e:
            return _error_response(e)
        return Response(RegistrationSerializer(registration).data)

    @extend_schema(responses={200: TripParticipantSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def participants(self, request, pk=None):
        """Children of the trip's groups with registrations and payments (admin)."""
        try:
            rows = get_trip_participants(trip_id=pk)
        except TripsServiceError as e:
            return _error_response(e)
        return Response(TripParticipantSerializer(rows, many=True).data)

    @extend_schema(responses={200: TripEmailPreviewSerializer})
    @action(detail=True, methods=['get'], url_path='email-preview')
    def email_preview(self, request, pk=None):
        """Render the trip info e-mail (admin)."""
        try:
            preview = get_trip_email_preview(trip_id=pk)
        except TripsServiceError as e:
            return _error_response(e)
        return Response(preview)

    @extend_schema(request=TripInfoEmailSerializer)
    @action(detail=True, methods=['post'], url_path='send-info-email')
    def send_info_email(self, request, pk=None):
        """E-mail the trip info to the parents of the trip's groups (admin)."""
        serializer = TripInfoEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = send_trip_info_email(
                trip_id=pk,
                subject=serializer.validated_data.get('subject') or None,
                body_html=serializer.validated_data.get('body_html') or None,
            )
        except TripsServiceError as e:
            return _error_response(e)
        return Response(result)

    @extend_schema(
        parameters=[OpenApiParameter('participant_id', str, description='Narrow to one child')],
        responses={200: ParentTripSerializer(many=True)},
    )
    @action(detail=False, methods=['get'], url_path='for-parent')
    def for_parent(self, request):
        """Published trips for the parent's children with participation status."""
        entries = get_trips_for_parent(
            parent=request.user,
            participant_id=request.query_params.get('participant_id'),
        )
        return Response(ParentTripSerializer(entries, many=True).data)

    @extend_schema(request=TripParseSerializer)
    @action(detail=False, methods=['post'], url_path='parse-description')
    def parse_description(self, request):
        """Turn a free-text trip description into trip form data with AI (admin)."""
        serializer = TripParseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            data = parse_trip_description(text=serializer.validated_data['text'])
        except (InvalidTripDescriptionError, TripParserConfigurationError,
                TripParserRateLimitError, TripParserUpstreamError) as e:
            return _error_response(e)
        return Response({'success': True, 'data': data})


class RegistrationViewSet(viewsets.ViewSet):
    """Admin actions on trip registrations."""

    permission_classes = [IsAuthenticated, IsClubAdmin]
    lookup_value_regex = '[0-9a-f-]{36}'

    @extend_schema(request=None, responses={200: RegistrationSerializer})
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel a registration and all its payments."""
        try:
            registration = cancel_registration(registration_id=pk)
        except TripsServiceError as e:
            return _error_response(e)
        return Response(RegistrationSerializer(registration).data)
