from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsClubAdmin

from .serializers import (
    CSVUploadSerializer,
    ImportRowFilterSerializer,
    TripsImportResetSerializer,
    ChildImportRowSerializer,
    TripImportRowSerializer,
    ImportStatsSerializer,
    StageResultSerializer,
    ChildrenImportResultSerializer,
    TripsImportResultSerializer,
    ContactFixResultSerializer,
)

from apps.imports.services import (
    stage_csv,
    get_import_stats,
    list_import_rows,
    run_children_import,
    reset_children_import,
    fix_contact_data,
    run_trips_import,
    reset_trips_import,
    # Exceptions
    ImportsServiceError,
)


class ImportRowPagination(PageNumberPagination):
    """Custom pagination for staging rows."""
    page_size = 100
    page_size_query_param = 'page_size'
    max_page_size = 1000


class ImportBufferViewSet(viewsets.ViewSet):
    """
    Shared endpoints of a staging table (admin).

    list: Staged rows, optionally by ?status=
    """

    permission_classes = [IsAuthenticated, IsClubAdmin]
    kind = None
    row_serializer_class = None

    def list(self, request):
        filters = ImportRowFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        rows = list_import_rows(kind=self.kind, **filters.validated_data)
        paginator = ImportRowPagination()
        page = paginator.paginate_queryset(rows, request, view=self)
        return paginator.get_paginated_response(self.row_serializer_class(page, many=True).data)

    @extend_schema(responses={200: ImportStatsSerializer})
    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Row counts per import status."""
        return Response(get_import_stats(kind=self.kind))

    @extend_schema(request={'multipart/form-data': CSVUploadSerializer}, responses={201: StageResultSerializer})
    @action(detail=False, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def upload(self, request):
        """Stage the rows of a CSV file."""
        serializer = CSVUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = stage_csv(kind=self.kind, upload=serializer.validated_data['file'])
        except ImportsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result, status=status.HTTP_201_CREATED)


class ChildImportViewSet(ImportBufferViewSet):
    """Children and parents from the club's old spreadsheet."""

    kind = 'children'
    row_serializer_class = ChildImportRowSerializer

    @extend_schema(responses={200: ChildImportRowSerializer(many=True)})
    def list(self, request):
        return super().list(request)

    @extend_schema(request=None, responses={200: ChildrenImportResultSerializer})
    @action(detail=False, methods=['post'])
    def run(self, request):
        """Import all pending rows."""
        return Response(run_children_import(imported_by=request.user))

    @extend_schema(request=None, responses={200: None})
    @action(detail=False, methods=['post'])
    def reset(self, request):
        """Return failed rows to pending."""
        return Response({'reset': reset_children_import()})

    @extend_schema(request=None, responses={200: ContactFixResultSerializer})
    @action(detail=False, methods=['post'], url_path='fix-contacts')
    def fix_contacts(self, request):
        """Copy phones and secondary e-mails of imported rows onto parents."""
        return Response(fix_contact_data())


class TripImportViewSet(ImportBufferViewSet):
    """Trips from the club's old spreadsheet."""

    kind = 'trips'
    row_serializer_class = TripImportRowSerializer

    @extend_schema(responses={200: TripImportRowSerializer(many=True)})
    def list(self, request):
        return super().list(request)

    @extend_schema(request=None, responses={200: TripsImportResultSerializer})
    @action(detail=False, methods=['post'])
    def run(self, request):
        """Import all pending rows as draft trips."""
        return Response(run_trips_import(imported_by=request.user))

    @extend_schema(request=TripsImportResetSerializer, responses={200: None})
    @action(detail=False, methods=['post'])
    def reset(self, request):
        """Return rows to pending (all, or the given row_ids)."""
        serializer = TripsImportResetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response({'reset': reset_trips_import(row_ids=serializer.validated_data['row_ids'])})
