from rest_framework import serializers

from billing.pricing.calculations import (
    PRODUCT_TYPE_SAREE, PRODUCT_TYPE_CLOTH, PRODUCT_TYPE_HANDICRAFT,
)

UNIT_PIECES = 'pieces'
UNIT_METERS = 'meters'
UNIT_GRAMS = 'grams'

# Units a product type can be sold in, first one is the default
PRODUCT_TYPE_UNITS = {
    PRODUCT_TYPE_SAREE: [UNIT_PIECES],
    PRODUCT_TYPE_CLOTH: [UNIT_METERS],
    PRODUCT_TYPE_HANDICRAFT: [UNIT_PIECES, UNIT_GRAMS],
}
UNIT_CHOICES = [UNIT_PIECES, UNIT_METERS, UNIT_GRAMS]


class BuyerSummarySerializer(serializers.Serializer):
    name = serializers.CharField()


class ProductSerializer(serializers.Serializer):
    """Product document exchanged with /v1/products"""
    id = serializers.IntegerField(required=False)
    name = serializers.CharField(max_length=200)
    type = serializers.ChoiceField(choices=list(PRODUCT_TYPE_UNITS))
    unit = serializers.ChoiceField(choices=UNIT_CHOICES, required=False)
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=0)
    barcode = serializers.CharField(max_length=100, required=False, allow_blank=True)
    buyerId = serializers.CharField()
    companyId = serializers.CharField(required=False, allow_blank=True)
    buyer = BuyerSummarySerializer(required=False, allow_null=True, read_only=True)

    def validate(self, attrs):
        """Unit must be one the product type is sold in"""
        allowed_units = PRODUCT_TYPE_UNITS[attrs['type']]
        unit = attrs.get('unit')
        if not unit:
            attrs['unit'] = allowed_units[0]
        elif unit not in allowed_units:
            raise serializers.ValidationError({
                'unit': f"{attrs['type']} is sold in {', '.join(allowed_units)}, not {unit}"
            })
        return attrs
