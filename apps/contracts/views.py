from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsClubAdmin, IsParent

from .serializers import (
    ContractTemplateInputSerializer,
    ContractPreviewInputSerializer,
    ContractFilterSerializer,
    ContractBulkDeleteSerializer,
    ContractTemplateSerializer,
    ContractPreviewSerializer,
    ContractListSerializer,
    ContractSerializer,
)

from apps.contracts.services import (
    get_contract_template,
    save_contract_template,
    activate_contract_template,
    deactivate_contract_template,
    preview_contract,
    get_contract_for_user,
    accept_contract,
    list_contracts,
    list_parent_contracts,
    delete_contracts,
    # Exceptions
    ContractsServiceError,
    ContractNotFoundError,
    ContractTemplateNotFoundError,
    ContractTripNotFoundError,
    ContractAccessError,
)


class ContractPagination(PageNumberPagination):
    """Custom pagination for contracts."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


def _error_response(exc):
    if isinstance(exc, (ContractNotFoundError, ContractTemplateNotFoundError, ContractTripNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ContractAccessError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc)}, status=code)


class ContractTemplateViewSet(viewsets.ViewSet):
    """
    Contract template of a trip, addressed by the trip ID (admin).

    retrieve: Stored template or the default wording
    update: Save the template text
    """

    permission_classes = [IsAuthenticated, IsClubAdmin]
    lookup_value_regex = '[0-9a-f-]{36}'

    @extend_schema(responses={200: ContractTemplateSerializer})
    def retrieve(self, request, pk=None):
        try:
            template = get_contract_template(trip_id=pk)
        except ContractsServiceError as e:
            return _error_response(e)
        return Response(ContractTemplateSerializer(template).data)

    @extend_schema(request=ContractTemplateInputSerializer, responses={200: ContractTemplateSerializer})
    def update(self, request, pk=None):
        serializer = ContractTemplateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            save_contract_template(
                trip_id=pk,
                template_text=serializer.validated_data['template_text'],
                user=request.user,
            )
        except ContractsServiceError as e:
            return _error_response(e)
        return Response(ContractTemplateSerializer(get_contract_template(trip_id=pk)).data)

    @extend_schema(request=None, responses={200: ContractTemplateSerializer})
    @action(detail=True, methods=['post'])
    def activate(self, request, pk=None):
        """Start producing contracts for confirmed children."""
        try:
            activate_contract_template(trip_id=pk, user=request.user)
        except ContractsServiceError as e:
            return _error_response(e)
        return Response(ContractTemplateSerializer(get_contract_template(trip_id=pk)).data)

    @extend_schema(request=None, responses={200: ContractTemplateSerializer})
    @action(detail=True, methods=['post'])
    def deactivate(self, request, pk=None):
        """Stop producing contracts."""
        try:
            deactivate_contract_template(trip_id=pk)
        except ContractsServiceError as e:
            return _error_response(e)
        return Response(ContractTemplateSerializer(get_contract_template(trip_id=pk)).data)

    @extend_schema(request=ContractPreviewInputSerializer, responses={200: ContractPreviewSerializer})
    @action(detail=True, methods=['post'])
    def preview(self, request, pk=None):
        """Render the template (or an unsaved text) for the first registered child."""
        serializer = ContractPreviewInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            text = preview_contract(trip_id=pk, template_text=serializer.validated_data.get('template_text'))
        except ContractsServiceError as e:
            return _error_response(e)
        return Response({'contract_text': text})


class ContractViewSet(viewsets.ViewSet):
    """
    Trip contracts.

    list: All contracts, optionally by ?trip_id= and ?accepted= (admin)
    retrieve: Contract with text (admin or the child's parent)
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['list', 'bulk_delete']:
            return [IsAuthenticated(), IsClubAdmin()]
        if self.action in ['accept', 'my']:
            return [IsAuthenticated(), IsParent()]
        return [IsAuthenticated()]

    @extend_schema(parameters=[ContractFilterSerializer], responses={200: ContractListSerializer(many=True)})
    def list(self, request):
        filters = ContractFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        contracts = list_contracts(**filters.validated_data)
        paginator = ContractPagination()
        page = paginator.paginate_queryset(contracts, request, view=self)
        return paginator.get_paginated_response(ContractListSerializer(page, many=True).data)

    @extend_schema(responses={200: ContractSerializer})
    def retrieve(self, request, pk=None):
        try:
            contract = get_contract_for_user(contract_id=pk, user=request.user)
        except ContractsServiceError as e:
            return _error_response(e)
        return Response(ContractSerializer(contract).data)

    @extend_schema(responses={200: ContractSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def my(self, request):
        """Contracts of the parent's children."""
        contracts = list_parent_contracts(parent=request.user)
        return Response(ContractSerializer(contracts, many=True).data)

    @extend_schema(request=None, responses={200: ContractSerializer})
    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        """Accept the contract electronically."""
        try:
            accept_contract(contract_id=pk, user=request.user)
            contract = get_contract_for_user(contract_id=pk, user=request.user)
        except ContractsServiceError as e:
            return _error_response(e)
        return Response(ContractSerializer(contract).data)

    @extend_schema(request=ContractBulkDeleteSerializer, responses={200: None})
    @action(detail=False, methods=['post'], url_path='bulk-delete')
    def bulk_delete(self, request):
        """Delete several contracts (admin)."""
        serializer = ContractBulkDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        deleted = delete_contracts(contract_ids=serializer.validated_data['contract_ids'])
        return Response({'deleted': deleted})
