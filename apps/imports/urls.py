from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'imports'

# Router for ViewSets
router = DefaultRouter()
router.register(r'children', views.ChildImportViewSet, basename='children-import')
router.register(r'trips', views.TripImportViewSet, basename='trips-import')

urlpatterns = [
    # Children import (admin)
    # GET    /api/imports/children/                 - Staged rows (?status=)
    # GET    /api/imports/children/stats/           - Counts per status
    # POST   /api/imports/children/upload/          - Stage a CSV file
    # POST   /api/imports/children/run/             - Import pending rows
    # POST   /api/imports/children/reset/           - Failed rows back to pending
    # POST   /api/imports/children/fix-contacts/    - Copy contact data onto parents

    # Trips import (admin)
    # GET    /api/imports/trips/                    - Staged rows (?status=)
    # GET    /api/imports/trips/stats/              - Counts per status
    # POST   /api/imports/trips/upload/             - Stage a CSV file
    # POST   /api/imports/trips/run/                - Import pending rows
    # POST   /api/imports/trips/reset/              - Rows back to pending

    path('', include(router.urls)),
]
