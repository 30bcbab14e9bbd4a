from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer

from .models import CashierSession


class CashierSessionSerializer(serializers.ModelSerializer):
    """Session with its frozen summary."""

    opened_by = UserMinimalSerializer(read_only=True)
    closed_by = UserMinimalSerializer(read_only=True)
    is_open = serializers.BooleanField(read_only=True)

    class Meta:
        model = CashierSession
        fields = [
            'id',
            'opened_by',
            'opened_at',
            'business_date',
            'opening_balance',
            'is_open',
            'closed_at',
            'closed_by',
            'closing_cash',
            'closing_non_cash',
            'closing_notes',
            'total_transactions',
            'total_revenue',
            'total_cash',
            'total_non_cash',
            'expected_cash',
            'expected_non_cash',
            'variance_cash',
            'variance_non_cash',
            'variance_total',
            'product_summary',
        ]
        read_only_fields = fields


class ProductSummarySerializer(serializers.Serializer):
    product_id = serializers.CharField(allow_null=True)
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()


class SessionSummarySerializer(serializers.Serializer):
    total_transactions = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_cash = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_non_cash = serializers.DecimalField(max_digits=12, decimal_places=2)
    expected_cash = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    expected_non_cash = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    variance_cash = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    variance_non_cash = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    variance_total = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    product_summary = ProductSummarySerializer(many=True)


class VarianceLineSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    label = serializers.ChoiceField(choices=['minus', 'plus', 'match'])
    description = serializers.CharField()


class VarianceSerializer(serializers.Serializer):
    cash = VarianceLineSerializer()
    non_cash = VarianceLineSerializer()
    total = VarianceLineSerializer()


class SessionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['needs-open', 'open', 'needs-close', 'closed'])
    session = CashierSessionSerializer(allow_null=True)
    summary = SessionSummarySerializer(allow_null=True)


class ClosePreviewSerializer(serializers.Serializer):
    session = CashierSessionSerializer()
    closed_at = serializers.DateTimeField()
    summary = SessionSummarySerializer()
    pending_saved_carts = serializers.IntegerField()


class CloseResultSerializer(serializers.Serializer):
    session = CashierSessionSerializer()
    summary = SessionSummarySerializer()
    variance = VarianceSerializer()


# Input serializers

class OpenSessionSerializer(serializers.Serializer):
    opening_balance = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True
    )


class CloseSessionSerializer(serializers.Serializer):
    closed_at = serializers.DateTimeField(required=False, allow_null=True)
    closing_cash = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    closing_non_cash = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class SessionStatusQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class SessionFilterSerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    opened_by = serializers.UUIDField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)
