from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.core.exceptions import PosServiceError
from apps.cashier.services import (
    get_session,
    get_session_status,
    open_session,
    preview_session_close,
    close_session,
    list_sessions,
)

from .serializers import (
    CashierSessionSerializer,
    ClosePreviewSerializer,
    CloseResultSerializer,
    CloseSessionSerializer,
    OpenSessionSerializer,
    SessionFilterSerializer,
    SessionStatusQuerySerializer,
    SessionStatusSerializer,
)


class SessionPagination(PageNumberPagination):
    """Pagination for shift history."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CashierSessionViewSet(viewsets.GenericViewSet):
    """
    Cashier sessions (shifts).

    list: Shift history (admins see every operator)
    retrieve: One session
    status: Current operator's session state for a day
    open: Open today's session
    preview_close: Summary to review before closing
    close: Close the session with counted amounts
    """

    serializer_class = CashierSessionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = SessionPagination

    @extend_schema(
        parameters=[
            OpenApiParameter(name='date_from', type=str, description='YYYY-MM-DD'),
            OpenApiParameter(name='date_to', type=str, description='YYYY-MM-DD'),
            OpenApiParameter(name='opened_by', type=str, description='Operator UUID (admins)'),
            OpenApiParameter(name='search', type=str),
        ],
        responses={200: CashierSessionSerializer(many=True)},
    )
    def list(self, request):
        """List sessions."""
        filters = SessionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        queryset = list_sessions(operator=request.user, **filters.validated_data)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(CashierSessionSerializer(page, many=True).data)
        return Response(CashierSessionSerializer(queryset, many=True).data)

    def retrieve(self, request, pk=None):
        """Get a session."""
        try:
            session = get_session(session_id=pk)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)

        if session.opened_by_id != request.user.id and not request.user.is_store_admin:
            return Response({'error': 'Cashier session not found.'}, status=status.HTTP_404_NOT_FOUND)
        return Response(CashierSessionSerializer(session).data)

    @extend_schema(
        parameters=[OpenApiParameter(name='date', type=str, description='YYYY-MM-DD (default today)')],
        responses={200: SessionStatusSerializer},
    )
    @action(detail=False, methods=['get'])
    def status(self, request):
        """Session state of the current operator."""
        query = SessionStatusQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        state = get_session_status(request.user, on_date=query.validated_data.get('date'))
        return Response(SessionStatusSerializer(state).data)

    @extend_schema(request=OpenSessionSerializer, responses={201: CashierSessionSerializer})
    @action(detail=False, methods=['post'])
    def open(self, request):
        """Open a session."""
        serializer = OpenSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            session = open_session(
                operator=request.user,
                opening_balance=serializer.validated_data.get('opening_balance'),
            )
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)

        return Response(CashierSessionSerializer(session).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: ClosePreviewSerializer})
    @action(detail=True, methods=['post'])
    def preview_close(self, request, pk=None):
        """Preview the close summary; send the returned closed_at to close."""
        try:
            preview = preview_session_close(session_id=pk, operator=request.user)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)

        return Response(ClosePreviewSerializer(preview).data)

    @extend_schema(request=CloseSessionSerializer, responses={200: CloseResultSerializer})
    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        """Close a session."""
        serializer = CloseSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = close_session(
                session_id=pk,
                operator=request.user,
                closing_cash=data.get('closing_cash'),
                closing_non_cash=data.get('closing_non_cash'),
                notes=data.get('notes', ''),
                closed_at=data.get('closed_at'),
            )
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)

        return Response(CloseResultSerializer(result).data)
