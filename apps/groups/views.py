from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsClubAdmin

from .models import Group
from .serializers import (
    GroupSerializer,
    GroupCreateSerializer,
    GroupUpdateSerializer,
    GroupRenameSerializer,
    GroupParticipantSerializer,
)

from apps.groups.services import (
    create_group,
    rename_group,
    update_group,
    delete_group,
    list_groups_for_user,
    get_group_participants,
    # Exceptions
    GroupNotFoundError,
    DuplicateGroupNameError,
)


class GroupPagination(PageNumberPagination):
    """Custom pagination for groups."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 100


class GroupViewSet(viewsets.ModelViewSet):
    """
    ViewSet for club groups.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Admins get all groups, parents the selectable ones
    create: Create a group (admin)
    retrieve: Get a group
    partial_update: Update a group (admin)
    destroy: Delete a group with its assignments (admin)
    """

    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = GroupPagination
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return list_groups_for_user(user=self.request.user)

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'create':
            return GroupCreateSerializer
        elif self.action == 'partial_update':
            return GroupUpdateSerializer
        return GroupSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['list', 'retrieve']:
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsClubAdmin()]

    def create(self, request, *args, **kwargs):
        """Create a new group."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            group = create_group(**serializer.validated_data)
        except DuplicateGroupNameError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(GroupSerializer(group).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        """Update group details."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            group = update_group(group_id=self.kwargs['pk'], **serializer.validated_data)
        except GroupNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except DuplicateGroupNameError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(GroupSerializer(group).data)

    def destroy(self, request, *args, **kwargs):
        """Delete a group."""
        try:
            delete_group(group_id=self.kwargs['pk'])
        except GroupNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=GroupRenameSerializer, responses={200: GroupSerializer})
    @action(detail=True, methods=['post'])
    def rename(self, request, pk=None):
        """Rename a group (admin only)."""
        serializer = GroupRenameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            group = rename_group(group_id=pk, name=serializer.validated_data['name'])
        except GroupNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except DuplicateGroupNameError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(GroupSerializer(group).data)

    @extend_schema(responses={200: GroupParticipantSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def participants(self, request, pk=None):
        """List children of the group with parent contacts (admin only)."""
        try:
            participants = get_group_participants(group_id=pk)
        except GroupNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(GroupParticipantSerializer(participants, many=True).data)
