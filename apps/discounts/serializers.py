from rest_framework import serializers

from apps.sales.serializers import CartInputSerializer

from .models import Discount, DiscountType, ValueType


class ComboItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class DiscountSerializer(serializers.ModelSerializer):
    """Full discount definition."""

    product_name = serializers.CharField(source='product.name', read_only=True, default=None)

    class Meta:
        model = Discount
        fields = [
            'id',
            'name',
            'code',
            'description',
            'discount_type',
            'value',
            'value_type',
            'min_purchase',
            'max_discount',
            'stock',
            'valid_from',
            'valid_until',
            'is_active',
            'product_id',
            'product_name',
            'product_ids',
            'min_quantity',
            'is_multiple',
            'combo_items',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class DiscountWriteSerializer(serializers.Serializer):
    """
    Input shape for creating and updating discounts.

    Business rules are applied by the service; this only checks types.
    """

    name = serializers.CharField(max_length=255)
    code = serializers.CharField(max_length=50)
    description = serializers.CharField(required=False, allow_blank=True)
    discount_type = serializers.ChoiceField(choices=DiscountType.choices)
    value = serializers.DecimalField(max_digits=12, decimal_places=2)
    value_type = serializers.ChoiceField(choices=ValueType.choices)
    min_purchase = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    max_discount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    stock = serializers.IntegerField(required=False, allow_null=True)
    valid_from = serializers.DateField(required=False, allow_null=True)
    valid_until = serializers.DateField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)
    product_id = serializers.UUIDField(required=False, allow_null=True)
    product_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    min_quantity = serializers.IntegerField(required=False)
    is_multiple = serializers.BooleanField(required=False)
    combo_items = ComboItemSerializer(many=True, required=False)


class DiscountFilterSerializer(serializers.Serializer):
    """Query parameters for the discount list."""

    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    discount_type = serializers.ChoiceField(choices=DiscountType.choices, required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class DiscountEvaluateSerializer(CartInputSerializer):
    pass


class DiscountEvaluationResultSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    is_eligible = serializers.BooleanField()
    isEligible = serializers.BooleanField(source='is_eligible')
    message = serializers.CharField()
