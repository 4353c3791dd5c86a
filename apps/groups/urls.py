from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'groups'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.GroupViewSet, basename='group')

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/groups/                      - List groups (parents: selectable only)
    # POST   /api/groups/                      - Create group (admin)
    # GET    /api/groups/{id}/                 - Get group details
    # PATCH  /api/groups/{id}/                 - Update group (admin)
    # DELETE /api/groups/{id}/                 - Delete group (admin)

    # Custom group actions
    # POST   /api/groups/{id}/rename/          - Rename group (admin)
    # GET    /api/groups/{id}/participants/    - Children with parent contacts (admin)

    path('', include(router.urls)),
]
