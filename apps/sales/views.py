from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.core.exceptions import PosServiceError
from apps.sales.services import (
    build_cart_from_snapshot,
    complete_transaction,
    get_transaction,
    list_transactions,
    void_transaction,
    save_cart,
    list_saved_carts,
    delete_saved_cart,
    restore_saved_cart,
)

from .serializers import (
    CartInputSerializer,
    CartSerializer,
    CheckoutSerializer,
    SavedCartCreateSerializer,
    SavedCartSerializer,
    TransactionFilterSerializer,
    TransactionListSerializer,
    TransactionSerializer,
)


class TransactionPagination(PageNumberPagination):
    """Pagination for transaction history."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class TransactionViewSet(viewsets.GenericViewSet):
    """
    Checkout and transaction history.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Transaction history (staff see their own)
    create: Complete a sale
    retrieve: Get one transaction with items
    void: Void a transaction (admins)
    """

    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = TransactionPagination

    def get_serializer_class(self):
        if self.action == 'list':
            return TransactionListSerializer
        if self.action == 'create':
            return CheckoutSerializer
        return TransactionSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter(name='date_from', type=str, description='YYYY-MM-DD'),
            OpenApiParameter(name='date_to', type=str, description='YYYY-MM-DD'),
            OpenApiParameter(name='status', type=str, enum=['selesai', 'gagal']),
            OpenApiParameter(name='payment_method', type=str, enum=['cash', 'non-cash']),
            OpenApiParameter(name='search', type=str),
        ],
        responses={200: TransactionListSerializer(many=True)},
    )
    def list(self, request):
        """List transactions."""
        filters = TransactionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        queryset = list_transactions(operator=request.user, **filters.validated_data)
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = TransactionListSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        return Response(TransactionListSerializer(queryset, many=True).data)

    @extend_schema(request=CheckoutSerializer, responses={201: TransactionSerializer})
    def create(self, request):
        """Complete a sale; prices come from the catalog, not the request."""
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            cart = build_cart_from_snapshot(data['lines'])
            record = complete_transaction(
                operator=request.user,
                cart=cart,
                payment_method=data['payment_method'],
                payment_amount=data.get('payment_amount'),
                discount_id=data.get('discount_id'),
                notes=data.get('notes', ''),
                transaction_number=data.get('transaction_number') or None,
            )
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)

        record = get_transaction(transaction_id=record.id, operator=request.user)
        return Response(TransactionSerializer(record).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        """Get a transaction."""
        try:
            record = get_transaction(transaction_id=pk, operator=request.user)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)
        return Response(TransactionSerializer(record).data)

    @extend_schema(request=None, responses={200: TransactionSerializer})
    @action(detail=True, methods=['post'])
    def void(self, request, pk=None):
        """Void a transaction."""
        try:
            void_transaction(transaction_id=pk, voided_by=request.user)
            record = get_transaction(transaction_id=pk, operator=request.user)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)
        return Response(TransactionSerializer(record).data)


class SavedCartViewSet(viewsets.GenericViewSet):
    """
    Parked carts of the current operator.

    list: Saved carts
    create: Park a cart
    destroy: Discard a saved cart
    restore: Re-price and return the cart, removing the saved row
    """

    serializer_class = SavedCartSerializer
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        if self.action == 'create':
            return SavedCartCreateSerializer
        return SavedCartSerializer

    def list(self, request):
        """List saved carts."""
        saved = list_saved_carts(operator=request.user)
        return Response(SavedCartSerializer(saved, many=True).data)

    @extend_schema(request=SavedCartCreateSerializer, responses={201: SavedCartSerializer})
    def create(self, request):
        """Save a cart."""
        serializer = SavedCartCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            cart = build_cart_from_snapshot(serializer.validated_data['lines'])
            saved = save_cart(
                operator=request.user,
                name=serializer.validated_data['name'],
                cart=cart,
            )
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)

        return Response(SavedCartSerializer(saved).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        """Delete a saved cart."""
        try:
            delete_saved_cart(saved_cart_id=pk, operator=request.user)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: CartSerializer})
    @action(detail=True, methods=['post'])
    def restore(self, request, pk=None):
        """Restore a saved cart."""
        try:
            cart = restore_saved_cart(saved_cart_id=pk, operator=request.user)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)
        return Response(CartSerializer(cart).data)


@extend_schema(
    request=CartInputSerializer,
    responses={200: CartSerializer},
    description="Price a cart from the catalog and suggest cash amounts.",
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def price_cart(request):
    """Price a cart."""
    serializer = CartInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        cart = build_cart_from_snapshot(serializer.validated_data['lines'])
    except PosServiceError as e:
        return Response(e.as_response_data(), status=e.status_code)

    return Response(CartSerializer(cart).data)
