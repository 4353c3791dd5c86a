from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'contracts'

# Router for ViewSets
router = DefaultRouter()
router.register(r'templates', views.ContractTemplateViewSet, basename='contract-template')
router.register(r'', views.ContractViewSet, basename='contract')

urlpatterns = [
    # Contract template routes (addressed by trip ID, admin)
    # GET    /api/contracts/templates/{trip_id}/              - Template or default wording
    # PUT    /api/contracts/templates/{trip_id}/              - Save template
    # POST   /api/contracts/templates/{trip_id}/activate/     - Activate
    # POST   /api/contracts/templates/{trip_id}/deactivate/   - Deactivate
    # POST   /api/contracts/templates/{trip_id}/preview/      - Render preview

    # Contract routes
    # GET    /api/contracts/                                  - List contracts (admin)
    # GET    /api/contracts/{id}/                             - Contract with text
    # GET    /api/contracts/my/                               - Own children's contracts (parent)
    # POST   /api/contracts/{id}/accept/                      - Accept contract (parent)
    # POST   /api/contracts/bulk-delete/                      - Delete contracts (admin)

    path('', include(router.urls)),
]
