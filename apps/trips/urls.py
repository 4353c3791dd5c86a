from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'trips'

# Router for ViewSets
router = DefaultRouter()
router.register(r'registrations', views.RegistrationViewSet, basename='registration')
router.register(r'', views.TripViewSet, basename='trip')

urlpatterns = [
    # Trip ViewSet routes
    # GET    /api/trips/                             - List trips (parents: published only)
    # POST   /api/trips/                             - Create trip (admin)
    # GET    /api/trips/{id}/                        - Get trip details
    # PUT    /api/trips/{id}/                        - Update trip (admin)
    # DELETE /api/trips/{id}/                        - Delete trip (admin)

    # Custom trip actions
    # PATCH  /api/trips/{id}/status/                 - Change status (admin)
    # POST   /api/trips/{id}/duplicate/              - Copy one year ahead (admin)
    # POST   /api/trips/{id}/register/               - Register a child
    # POST   /api/trips/{id}/participation/          - Set participation status
    # GET    /api/trips/{id}/participants/           - Children with registrations (admin)
    # GET    /api/trips/{id}/email-preview/          - Render trip info e-mail (admin)
    # POST   /api/trips/{id}/send-info-email/        - Send trip info e-mail (admin)
    # GET    /api/trips/for-parent/                  - Trips for the parent's children
    # POST   /api/trips/parse-description/           - AI form filling (admin)

    # Registration routes
    # POST   /api/trips/registrations/{id}/cancel/   - Cancel registration (admin)

    path('', include(router.urls)),
]
