from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.permissions import IsStoreAdminOrReadOnly
from apps.core.exceptions import PosServiceError
from apps.discounts.services import (
    create_discount,
    update_discount,
    delete_discount,
    get_discount,
    list_discounts,
    evaluate_discount,
)
from apps.sales.services import build_cart_from_snapshot

from .serializers import (
    DiscountEvaluateSerializer,
    DiscountEvaluationResultSerializer,
    DiscountFilterSerializer,
    DiscountSerializer,
    DiscountWriteSerializer,
)


class DiscountViewSet(viewsets.GenericViewSet):
    """
    ViewSet for discounts.

    Any operator can read and evaluate; only store admins can write.

    list: Discounts (filter by is_active, discount_type, search)
    create: Create a discount (admin)
    retrieve: Get a discount
    update / partial_update: Edit a discount (admin)
    destroy: Delete a discount (admin)
    evaluate: Price a cart with this discount
    """

    serializer_class = DiscountSerializer
    permission_classes = [IsStoreAdminOrReadOnly]

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return DiscountWriteSerializer
        if self.action == 'evaluate':
            return DiscountEvaluateSerializer
        return DiscountSerializer

    def get_permissions(self):
        """Evaluation is a POST but available to every operator."""
        if self.action == 'evaluate':
            return [IsAuthenticated()]
        return super().get_permissions()

    @extend_schema(
        parameters=[
            OpenApiParameter(name='is_active', type=bool),
            OpenApiParameter(name='discount_type', type=str, enum=['order', 'product', 'combo']),
            OpenApiParameter(name='search', type=str),
        ],
        responses={200: DiscountSerializer(many=True)},
    )
    def list(self, request):
        """List discounts."""
        filters = DiscountFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        discounts = list_discounts(**filters.validated_data)
        return Response(DiscountSerializer(discounts, many=True).data)

    def retrieve(self, request, pk=None):
        """Get a discount."""
        try:
            discount = get_discount(discount_id=pk)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)
        return Response(DiscountSerializer(discount).data)

    @extend_schema(request=DiscountWriteSerializer, responses={201: DiscountSerializer})
    def create(self, request):
        """Create a discount."""
        serializer = DiscountWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            discount = create_discount(**serializer.validated_data)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)

        return Response(DiscountSerializer(discount).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=DiscountWriteSerializer, responses={200: DiscountSerializer})
    def update(self, request, pk=None, partial=False):
        """Update a discount."""
        serializer = DiscountWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            discount = update_discount(discount_id=pk, **serializer.validated_data)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)

        return Response(DiscountSerializer(discount).data)

    @extend_schema(request=DiscountWriteSerializer, responses={200: DiscountSerializer})
    def partial_update(self, request, pk=None):
        """Partially update a discount."""
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request, pk=None):
        """Delete a discount."""
        try:
            delete_discount(discount_id=pk)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        request=DiscountEvaluateSerializer,
        responses={200: DiscountEvaluationResultSerializer},
    )
    @action(detail=True, methods=['post'])
    def evaluate(self, request, pk=None):
        """Evaluate this discount against a cart."""
        serializer = DiscountEvaluateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            cart = build_cart_from_snapshot(serializer.validated_data['lines'])
            result = evaluate_discount(pk, cart)
        except PosServiceError as e:
            return Response(e.as_response_data(), status=e.status_code)

        return Response(DiscountEvaluationResultSerializer(result).data)
