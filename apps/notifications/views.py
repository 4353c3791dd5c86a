from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.permissions import IsClubAdmin

from .serializers import (
    NotificationSerializer,
    NotificationCreateSerializer,
    NotificationLogSerializer,
    SendResultSerializer,
    EmailTemplateSerializer,
    EmailTemplateUpdateSerializer,
)

from apps.notifications.services import (
    create_notification,
    approve_notification,
    send_notification,
    delete_notification,
    list_notifications,
    get_notification,
    get_notification_logs,
    list_email_templates,
    get_email_template,
    update_email_template,
    reset_email_template,
    # Exceptions
    NotificationNotFoundError,
    InvalidNotificationTargetError,
    InvalidNotificationStateError,
    UnsupportedChannelError,
    NoRecipientsError,
    EmailTemplateNotFoundError,
)


class NotificationPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class NotificationViewSet(viewsets.ViewSet):
    """
    Bulk notifications (admin only).

    list: Notifications, newest first (optional ?status=)
    create: Draft a notification
    retrieve: Get a notification
    destroy: Delete a draft
    """

    permission_classes = [IsAuthenticated, IsClubAdmin]

    @extend_schema(
        parameters=[OpenApiParameter('status', str, description='Filter by status')],
        responses={200: NotificationSerializer(many=True)},
    )
    def list(self, request):
        queryset = list_notifications(status=request.query_params.get('status'))
        paginator = NotificationPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        return paginator.get_paginated_response(NotificationSerializer(page, many=True).data)

    @extend_schema(request=NotificationCreateSerializer, responses={201: NotificationSerializer})
    def create(self, request):
        serializer = NotificationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            notification = create_notification(created_by=request.user, **serializer.validated_data)
        except InvalidNotificationTargetError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: NotificationSerializer})
    def retrieve(self, request, pk=None):
        try:
            notification = get_notification(notification_id=pk)
        except NotificationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(NotificationSerializer(notification).data)

    def destroy(self, request, pk=None):
        try:
            delete_notification(notification_id=pk)
        except NotificationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidNotificationStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: NotificationSerializer})
    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        """Approve a draft for sending."""
        try:
            notification = approve_notification(notification_id=pk, approved_by=request.user)
        except NotificationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidNotificationStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(NotificationSerializer(notification).data)

    @extend_schema(request=None, responses={200: SendResultSerializer})
    @action(detail=True, methods=['post'])
    def send(self, request, pk=None):
        """Send an approved notification by e-mail."""
        try:
            result = send_notification(notification_id=pk)
        except NotificationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (InvalidNotificationStateError, UnsupportedChannelError, NoRecipientsError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)

    @extend_schema(responses={200: NotificationLogSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def logs(self, request, pk=None):
        """Delivery log of a notification."""
        try:
            logs = get_notification_logs(notification_id=pk)
        except NotificationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(NotificationLogSerializer(logs, many=True).data)


class EmailTemplateViewSet(viewsets.ViewSet):
    """
    Transactional e-mail templates (admin only).

    list: All templates (created from defaults on first use)
    retrieve: Get a template by key
    partial_update: Change name, subject or body
    """

    permission_classes = [IsAuthenticated, IsClubAdmin]
    lookup_value_regex = '[-a-zA-Z0-9_]+'

    @extend_schema(responses={200: EmailTemplateSerializer(many=True)})
    def list(self, request):
        return Response(EmailTemplateSerializer(list_email_templates(), many=True).data)

    @extend_schema(responses={200: EmailTemplateSerializer})
    def retrieve(self, request, pk=None):
        try:
            template = get_email_template(key=pk)
        except EmailTemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(EmailTemplateSerializer(template).data)

    @extend_schema(request=EmailTemplateUpdateSerializer, responses={200: EmailTemplateSerializer})
    def partial_update(self, request, pk=None):
        serializer = EmailTemplateUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            template = update_email_template(key=pk, **serializer.validated_data)
        except EmailTemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(EmailTemplateSerializer(template).data)

    @extend_schema(request=None, responses={200: EmailTemplateSerializer})
    @action(detail=True, methods=['post'])
    def reset(self, request, pk=None):
        """Restore the built-in text of a template."""
        try:
            template = reset_email_template(key=pk)
        except EmailTemplateNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(EmailTemplateSerializer(template).data)
