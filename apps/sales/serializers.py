from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer

from .models import PaymentMethod, SavedCart, Transaction, TransactionItem, TransactionStatus
from .money import suggested_payments


class CartLineInputSerializer(serializers.Serializer):
    """One cart line as sent by the checkout screen (ids only, no prices)."""

    product_id = serializers.UUIDField()
    variant_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)
    extra_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)
    quantity = serializers.IntegerField(min_value=1, default=1)


class CartInputSerializer(serializers.Serializer):
    lines = CartLineInputSerializer(many=True, allow_empty=False)


class CheckoutSerializer(CartInputSerializer):
    """Input for completing a sale."""

    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    payment_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True
    )
    discount_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    transaction_number = serializers.CharField(
        max_length=50,
        required=False,
        allow_blank=True,
        default=''
    )


class CartExtraSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartLineSerializer(serializers.Serializer):
    """Priced cart line (read-only)."""

    product_id = serializers.CharField()
    product_name = serializers.CharField()
    variant_ids = serializers.SerializerMethodField()
    variant_label = serializers.CharField()
    extras = CartExtraSerializer(many=True)
    extras_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    quantity = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)

    def get_variant_ids(self, line):
        return list(line.key.variant_ids)


class CartSerializer(serializers.Serializer):
    """Priced cart with totals and suggested cash amounts (read-only)."""

    lines = CartLineSerializer(many=True)
    total = serializers.SerializerMethodField()
    suggested_payments = serializers.SerializerMethodField()

    def get_total(self, cart):
        return str(cart.total())

    def get_suggested_payments(self, cart):
        return [str(amount) for amount in suggested_payments(cart.total())]


class TransactionItemSerializer(serializers.ModelSerializer):

    class Meta:
        model = TransactionItem
        fields = [
            'id',
            'product',
            'product_name',
            'variant_name',
            'extras',
            'extras_total',
            'quantity',
            'unit_price',
            'subtotal',
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    """Full transaction with items."""

    items = TransactionItemSerializer(many=True, read_only=True)
    user = UserMinimalSerializer(read_only=True)
    voided_by = UserMinimalSerializer(read_only=True)
    is_voided = serializers.BooleanField(read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id',
            'transaction_number',
            'user',
            'subtotal_amount',
            'total_amount',
            'discount',
            'discount_name',
            'discount_code',
            'discount_type',
            'discount_value',
            'discount_value_type',
            'discount_amount',
            'payment_method',
            'payment_amount',
            'change_amount',
            'status',
            'is_voided',
            'notes',
            'voided_by',
            'voided_at',
            'created_at',
            'items',
        ]
        read_only_fields = fields


class TransactionListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for history lists."""

    cashier = serializers.CharField(source='user.get_display_name', read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id',
            'transaction_number',
            'cashier',
            'total_amount',
            'discount_code',
            'discount_amount',
            'payment_method',
            'status',
            'created_at',
        ]
        read_only_fields = fields


class TransactionFilterSerializer(serializers.Serializer):
    """Query parameters for the transaction history."""

    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=TransactionStatus.choices, required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class SavedCartSerializer(serializers.ModelSerializer):

    item_count = serializers.SerializerMethodField()

    class Meta:
        model = SavedCart
        fields = ['id', 'name', 'items', 'item_count', 'total', 'created_at']
        read_only_fields = fields

    def get_item_count(self, obj):
        return sum(int(item.get('quantity', 0)) for item in obj.items)


class SavedCartCreateSerializer(CartInputSerializer):
    name = serializers.CharField(max_length=255)
