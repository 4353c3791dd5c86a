from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'participants'

router = DefaultRouter()
router.register(r'custom-fields', views.CustomFieldDefinitionViewSet, basename='custom-field')
router.register(r'', views.ParticipantViewSet, basename='participant')

urlpatterns = [
    # GET    /api/participants/                          - List children
    # POST   /api/participants/                          - Add child
    # GET    /api/participants/{id}/                     - Child details
    # PATCH  /api/participants/{id}/                     - Update child
    # DELETE /api/participants/{id}/                     - Delete child
    # POST   /api/participants/bulk-delete/              - Delete many (admin)
    # POST   /api/participants/{id}/assign-group/        - Set group (admin)
    # PATCH  /api/participants/{id}/note/                - Update notes
    # GET    /api/participants/{id}/registrations/       - Active registrations
    # CRUD   /api/participants/custom-fields/            - Custom field definitions

    path('', include(router.urls)),
]
