from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'notifications'

# Router for ViewSets
router = DefaultRouter()
router.register(r'email-templates', views.EmailTemplateViewSet, basename='email-template')
router.register(r'', views.NotificationViewSet, basename='notification')

urlpatterns = [
    # Notification routes (admin)
    # GET    /api/notifications/                   - List notifications
    # POST   /api/notifications/                   - Draft notification
    # GET    /api/notifications/{id}/              - Get notification
    # DELETE /api/notifications/{id}/              - Delete draft
    # POST   /api/notifications/{id}/approve/      - Approve draft
    # POST   /api/notifications/{id}/send/         - Send approved notification
    # GET    /api/notifications/{id}/logs/         - Delivery logs

    # E-mail template routes (admin)
    # GET    /api/notifications/email-templates/             - List templates
    # GET    /api/notifications/email-templates/{key}/       - Get template
    # PATCH  /api/notifications/email-templates/{key}/       - Update template
    # POST   /api/notifications/email-templates/{key}/reset/ - Restore default text

    path('', include(router.urls)),
]
