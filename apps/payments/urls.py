from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'payments'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.PaymentViewSet, basename='payment')

urlpatterns = [
    # Parent views
    # GET    /api/payments/my/                        - Own children's payments
    # GET    /api/payments/bank-accounts/             - Accounts to pay into
    path('my/', views.my_payments, name='my-payments'),
    path('bank-accounts/', views.bank_accounts, name='bank-accounts'),

    # Payment ViewSet routes
    # GET    /api/payments/                           - List payments (admin)
    # GET    /api/payments/summary/                   - Per-trip finance summary (admin)
    # GET    /api/payments/{id}/                      - Payment details
    # POST   /api/payments/{id}/add-transaction/      - Record money (admin)
    # POST   /api/payments/{id}/mark-paid/            - Settle remaining amount (admin)
    # POST   /api/payments/{id}/discount/             - Apply discount (admin)
    # PATCH  /api/payments/{id}/status/               - Override status (admin)
    # PATCH  /api/payments/{id}/amount/               - Change amount (admin)
    # PATCH  /api/payments/{id}/note/                 - Admin note (admin)
    # GET    /api/payments/{id}/transactions/         - Transactions

    path('', include(router.urls)),
]
