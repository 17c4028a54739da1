from decimal import Decimal
import datetime

from rest_framework import serializers

from billing.pricing.calculations import DISCOUNT_TYPES, calculate_final_total
from .cart import PAYMENT_METHODS

BILL_STATUS_COMPLETED = 'completed'

AMOUNT_FIELD_KWARGS = {'max_digits': 12, 'decimal_places': 2}


class PaymentSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=PAYMENT_METHODS)
    amount = serializers.DecimalField(min_value=0, **AMOUNT_FIELD_KWARGS)


class BillItemSerializer(serializers.Serializer):
    productId = serializers.IntegerField()
    productName = serializers.CharField()
    originalBarcode = serializers.CharField()
    saleBarcode = serializers.CharField()
    productType = serializers.CharField()
    unit = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    originalPrice = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    salePrice = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    total = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    quantity = serializers.IntegerField(min_value=1)
    cgst = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    sgst = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    priceIncrease = serializers.DecimalField(default=Decimal('0'), **AMOUNT_FIELD_KWARGS)


class BillSerializer(serializers.Serializer):
    """Bill document POSTed to /v1/bills"""
    billNo = serializers.CharField(max_length=50)
    date = serializers.DateTimeField(default_timezone=datetime.timezone.utc)
    customerName = serializers.CharField()
    salesmanName = serializers.CharField()
    salesmanId = serializers.IntegerField(required=False, allow_null=True)
    companyId = serializers.CharField(allow_blank=True)
    items = BillItemSerializer(many=True, allow_empty=False)
    totalCGST = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    totalSGST = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    grandTotal = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)
    discountType = serializers.ChoiceField(choices=DISCOUNT_TYPES)
    discountValue = serializers.DecimalField(min_value=0, **AMOUNT_FIELD_KWARGS)
    discountAmount = serializers.DecimalField(min_value=0, **AMOUNT_FIELD_KWARGS)
    finalTotal = serializers.DecimalField(min_value=0, **AMOUNT_FIELD_KWARGS)
    payments = PaymentSerializer(many=True, allow_empty=False)
    status = serializers.ChoiceField(choices=[BILL_STATUS_COMPLETED], default=BILL_STATUS_COMPLETED)

    def validate(self, attrs):
        """Totals must be consistent and fully paid"""
        expected_final = calculate_final_total(attrs['grandTotal'], attrs['discountAmount'])
        if attrs['finalTotal'] != expected_final:
            raise serializers.ValidationError({
                'finalTotal': f"Final total {attrs['finalTotal']} does not match "
                              f"grand total less discount ({expected_final})"
            })

        total_paid = sum((p['amount'] for p in attrs['payments']), Decimal('0'))
        if total_paid != attrs['finalTotal']:
            raise serializers.ValidationError({
                'payments': 'Total paid must match the grand total.'
            })
        return attrs
