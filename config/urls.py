"""
URL configuration for the Biegun Sport project.

Every API lives under /api/; see /api/docs/ for the interactive schema.
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenRefreshView

from apps.payments.views import payment_reminders_cron
from config.views import health_check

urlpatterns = [
    # Health check (for Render)
    path('api/health/', health_check, name='health-check'),

    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='api-schema'), name='api-docs'),

    # Authentication
    path('api/auth/', include('apps.accounts.urls')),
    path('api/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # API endpoints
    path('api/groups/', include('apps.groups.urls')),
    path('api/participants/', include('apps.participants.urls')),
    path('api/trips/', include('apps.trips.urls')),
    path('api/payments/', include('apps.payments.urls')),
    path('api/contracts/', include('apps.contracts.urls')),
    path('api/notifications/', include('apps.notifications.urls')),
    path('api/imports/', include('apps.imports.urls')),

    # Scheduled jobs
    path('api/cron/payment-reminders/', payment_reminders_cron, name='cron-payment-reminders'),
]

# Static files (development only)
if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'
