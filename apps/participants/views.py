from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsClubAdmin

from .models import CustomFieldDefinition
from .serializers import (
    ParticipantInputSerializer,
    ParticipantBulkDeleteSerializer,
    AssignGroupSerializer,
    ParticipantNoteSerializer,
    ParticipantSerializer,
    ParticipantRegistrationSerializer,
    CustomFieldDefinitionSerializer,
)

from apps.participants.services import (
    UNCHANGED,
    list_participants_for_user,
    get_participant_for_user,
    create_participant,
    update_participant,
    delete_participants,
    assign_group,
    update_note,
    get_participant_registrations,
    # Exceptions
    ParticipantNotFoundError,
    NotParticipantOwnerError,
    InvalidGroupError,
    ActiveRegistrationsError,
)


class ParticipantPagination(PageNumberPagination):
    """Custom pagination for children."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


def _error_response(exc):
    """Map participant service errors to HTTP responses."""
    if isinstance(exc, ParticipantNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, NotParticipantOwnerError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc)}, status=code)


SERVICE_ERRORS = (
    ParticipantNotFoundError,
    NotParticipantOwnerError,
    InvalidGroupError,
    ActiveRegistrationsError,
)


class ParticipantViewSet(viewsets.ViewSet):
    """
    Children of the club.

    Parents see and manage only their own children, admins see everyone.

    list: Visible children
    create: Add a child owned by the requesting user
    retrieve: Child details
    partial_update: Update a child (owner or admin)
    destroy: Delete a child without active registrations
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-f-]{36}'

    @extend_schema(responses={200: ParticipantSerializer(many=True)})
    def list(self, request):
        queryset = list_participants_for_user(user=request.user)
        paginator = ParticipantPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        serializer = ParticipantSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @extend_schema(request=ParticipantInputSerializer, responses={201: ParticipantSerializer})
    def create(self, request):
        serializer = ParticipantInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            participant = create_participant(parent=request.user, **serializer.validated_data)
        except SERVICE_ERRORS as e:
            return _error_response(e)

        return Response(ParticipantSerializer(participant).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ParticipantSerializer})
    def retrieve(self, request, pk=None):
        try:
            participant = get_participant_for_user(participant_id=pk, user=request.user)
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(ParticipantSerializer(participant).data)

    @extend_schema(request=ParticipantInputSerializer, responses={200: ParticipantSerializer})
    def partial_update(self, request, pk=None):
        serializer = ParticipantInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        group_id = data.pop('group_id', UNCHANGED)

        try:
            participant = update_participant(
                participant_id=pk,
                user=request.user,
                group_id=group_id,
                **data
            )
        except SERVICE_ERRORS as e:
            return _error_response(e)

        return Response(ParticipantSerializer(participant).data)

    def destroy(self, request, pk=None):
        try:
            delete_participants(participant_ids=[pk], user=request.user)
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=ParticipantBulkDeleteSerializer)
    @action(detail=False, methods=['post'], url_path='bulk-delete',
            permission_classes=[IsAuthenticated, IsClubAdmin])
    def bulk_delete(self, request):
        """Delete many children at once (admin only)."""
        serializer = ParticipantBulkDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = delete_participants(
                participant_ids=serializer.validated_data['participant_ids'],
                user=request.user,
            )
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(result)

    @extend_schema(request=AssignGroupSerializer, responses={200: ParticipantSerializer})
    @action(detail=True, methods=['post'], url_path='assign-group',
            permission_classes=[IsAuthenticated, IsClubAdmin])
    def assign_group(self, request, pk=None):
        """Set or clear the child's group (admin only)."""
        serializer = AssignGroupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            participant = assign_group(
                participant_id=pk,
                group_id=serializer.validated_data['group_id'],
                assigned_by=request.user,
            )
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(ParticipantSerializer(participant).data)

    @extend_schema(request=ParticipantNoteSerializer, responses={200: ParticipantSerializer})
    @action(detail=True, methods=['patch'])
    def note(self, request, pk=None):
        """Replace the child's notes."""
        serializer = ParticipantNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            participant = update_note(
                participant_id=pk,
                user=request.user,
                notes=serializer.validated_data['notes'],
            )
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(ParticipantSerializer(participant).data)

    @extend_schema(responses={200: ParticipantRegistrationSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def registrations(self, request, pk=None):
        """Active trip registrations of the child."""
        try:
            registrations = get_participant_registrations(participant_id=pk, user=request.user)
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(ParticipantRegistrationSerializer(registrations, many=True).data)


class CustomFieldDefinitionViewSet(viewsets.ModelViewSet):
    """Extra child form fields. Everyone can read, admins manage."""

    queryset = CustomFieldDefinition.objects.all()
    serializer_class = CustomFieldDefinitionSerializer
    pagination_class = None

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsClubAdmin()]
