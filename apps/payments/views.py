import logging

from django.conf import settings
from django.utils.crypto import constant_time_compare
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsClubAdmin, IsParent

from .serializers import (
    PaymentFilterSerializer,
    ParentPaymentFilterSerializer,
    FinanceSummaryFilterSerializer,
    TransactionCreateSerializer,
    MarkPaidSerializer,
    DiscountSerializer,
    PaymentStatusSerializer,
    PaymentAmountSerializer,
    PaymentNoteSerializer,
    PaymentSerializer,
    ParentPaymentSerializer,
    PaymentTransactionSerializer,
    BankAccountsSerializer,
    ReminderResultSerializer,
    FinanceSummarySerializer,
)

from apps.payments.services import (
    get_payment_for_user,
    add_transaction,
    mark_as_paid,
    apply_discount,
    set_payment_status,
    update_amount,
    update_admin_note,
    list_payments,
    list_parent_payments,
    get_bank_accounts_for_parent,
    get_payment_transactions,
    refresh_overdue_statuses,
    finance_summary,
    send_payment_reminders,
    # Exceptions
    PaymentsServiceError,
    PaymentNotFoundError,
)

logger = logging.getLogger(__name__)


class PaymentPagination(PageNumberPagination):
    """Custom pagination for payments."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 500


def _error_response(exc):
    code = status.HTTP_404_NOT_FOUND if isinstance(exc, PaymentNotFoundError) else status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc)}, status=code)


class PaymentViewSet(viewsets.ViewSet):
    """
    Payments of trip registrations.

    list: All payments with filters (admin)
    retrieve: Payment details (admin or owning parent)
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['retrieve', 'transactions']:
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsClubAdmin()]

    @extend_schema(parameters=[PaymentFilterSerializer], responses={200: PaymentSerializer(many=True)})
    def list(self, request):
        filters = PaymentFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        payments = list_payments(**filters.validated_data)
        paginator = PaymentPagination()
        page = paginator.paginate_queryset(payments, request, view=self)
        return paginator.get_paginated_response(PaymentSerializer(page, many=True).data)

    @extend_schema(parameters=[FinanceSummaryFilterSerializer], responses={200: FinanceSummarySerializer})
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """Money collected and missing per trip (admin)."""
        filters = FinanceSummaryFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        return Response(FinanceSummarySerializer(finance_summary(**filters.validated_data)).data)

    @extend_schema(responses={200: PaymentSerializer})
    def retrieve(self, request, pk=None):
        try:
            payment = get_payment_for_user(payment_id=pk, user=request.user)
        except PaymentsServiceError as e:
            return _error_response(e)
        serializer_class = PaymentSerializer if request.user.is_admin else ParentPaymentSerializer
        return Response(serializer_class(payment).data)

    @extend_schema(request=TransactionCreateSerializer, responses={201: PaymentTransactionSerializer})
    @action(detail=True, methods=['post'], url_path='add-transaction')
    def add_transaction(self, request, pk=None):
        """Record money received (admin)."""
        serializer = TransactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record = add_transaction(payment_id=pk, recorded_by=request.user, **serializer.validated_data)
        except PaymentsServiceError as e:
            return _error_response(e)
        return Response(PaymentTransactionSerializer(record).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=MarkPaidSerializer, responses={200: PaymentSerializer})
    @action(detail=True, methods=['post'], url_path='mark-paid')
    def mark_paid(self, request, pk=None):
        """Settle the remaining amount (admin)."""
        serializer = MarkPaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = mark_as_paid(payment_id=pk, marked_by=request.user, **serializer.validated_data)
        except PaymentsServiceError as e:
            return _error_response(e)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(request=DiscountSerializer, responses={200: PaymentSerializer})
    @action(detail=True, methods=['post'])
    def discount(self, request, pk=None):
        """Apply a percentage discount (admin)."""
        serializer = DiscountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = apply_discount(payment_id=pk, applied_by=request.user, **serializer.validated_data)
        except PaymentsServiceError as e:
            return _error_response(e)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(request=PaymentStatusSerializer, responses={200: PaymentSerializer})
    @action(detail=True, methods=['patch'], url_path='status')
    def set_status(self, request, pk=None):
        """Override the payment status (admin)."""
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = set_payment_status(payment_id=pk, marked_by=request.user, **serializer.validated_data)
        except PaymentsServiceError as e:
            return _error_response(e)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(request=PaymentAmountSerializer, responses={200: PaymentSerializer})
    @action(detail=True, methods=['patch'])
    def amount(self, request, pk=None):
        """Change the amount owed (admin)."""
        serializer = PaymentAmountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = update_amount(payment_id=pk, amount=serializer.validated_data['amount'])
        except PaymentsServiceError as e:
            return _error_response(e)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(request=PaymentNoteSerializer, responses={200: PaymentSerializer})
    @action(detail=True, methods=['patch'])
    def note(self, request, pk=None):
        """Update the admin note (admin)."""
        serializer = PaymentNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = update_admin_note(payment_id=pk, note=serializer.validated_data['admin_notes'])
        except PaymentsServiceError as e:
            return _error_response(e)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(responses={200: PaymentTransactionSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def transactions(self, request, pk=None):
        """Money received for a payment (admin or owning parent)."""
        try:
            records = get_payment_transactions(payment_id=pk, user=request.user)
        except PaymentsServiceError as e:
            return _error_response(e)
        return Response(PaymentTransactionSerializer(records, many=True).data)


@extend_schema(
    tags=['Payments'],
    parameters=[ParentPaymentFilterSerializer],
    responses={200: ParentPaymentSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsParent])
def my_payments(request):
    """Payments of the parent's children confirmed on trips."""
    filters = ParentPaymentFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    payments = list_parent_payments(parent=request.user, **filters.validated_data)
    return Response(ParentPaymentSerializer(payments, many=True).data)


@extend_schema(tags=['Payments'], responses={200: BankAccountsSerializer})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bank_accounts(request):
    """Bank accounts the parent should pay into."""
    return Response(get_bank_accounts_for_parent(parent=request.user))


@extend_schema(tags=['Cron'], responses={200: ReminderResultSerializer})
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def payment_reminders_cron(request):
    """
    Daily job: refresh overdue statuses and send payment reminders.

    Guarded by ``Authorization: Bearer <CRON_SECRET>`` when the secret is set.
    """
    secret = settings.CRON_SECRET
    if secret:
        header = request.META.get('HTTP_AUTHORIZATION', '')
        if not constant_time_compare(header, f'Bearer {secret}'):
            return Response({'error': 'Unauthorized'}, status=status.HTTP_401_UNAUTHORIZED)

    refreshed = refresh_overdue_statuses()
    result = send_payment_reminders()
    logger.info("Cron payment reminders done (%s statuses refreshed)", refreshed)
    return Response(result)
