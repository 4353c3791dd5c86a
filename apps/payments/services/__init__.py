"""Payments app services layer."""

from .exceptions import (
    PaymentsServiceError,
    PaymentNotFoundError,
    PaymentAlreadyPaidError,
    PaymentCancelledError,
    InvalidPaymentOperationError,
)

from .payment_creation import (
    create_payments_for_registration,
    cancel_pending_payments,
    cancel_registration_payments,
    has_open_payments,
)

from .payment_management import (
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
)

from .reminders import send_payment_reminders


__all__ = [
    # Exceptions
    'PaymentsServiceError',
    'PaymentNotFoundError',
    'PaymentAlreadyPaidError',
    'PaymentCancelledError',
    'InvalidPaymentOperationError',

    # Creation
    'create_payments_for_registration',
    'cancel_pending_payments',
    'cancel_registration_payments',
    'has_open_payments',

    # Management
    'get_payment_for_user',
    'add_transaction',
    'mark_as_paid',
    'apply_discount',
    'set_payment_status',
    'update_amount',
    'update_admin_note',
    'list_payments',
    'list_parent_payments',
    'get_bank_accounts_for_parent',
    'get_payment_transactions',
    'refresh_overdue_statuses',
    'finance_summary',

    # Reminders
    'send_payment_reminders',
]
