from decimal import Decimal
from rest_framework import serializers


class BankDetailSerializer(serializers.Serializer):
    bankName = serializers.CharField(max_length=200)
    accountNumber = serializers.CharField(max_length=50)
    ifscCode = serializers.CharField(max_length=20)
    accountHolderName = serializers.CharField(max_length=200)


class BuyerSerializer(serializers.Serializer):
    """Buyer (supplier) document exchanged with /v1/buyers"""
    id = serializers.CharField(required=False)
    name = serializers.CharField(max_length=200)
    address = serializers.CharField()
    bankDetails = BankDetailSerializer(many=True, allow_empty=False)


class SalesmanSerializer(serializers.Serializer):
    """Salesman document exchanged with /v1/salesmen"""
    id = serializers.IntegerField(required=False)
    name = serializers.CharField(max_length=200)
    phone = serializers.CharField(max_length=20)
    address = serializers.CharField()
    commissionRate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100,
        required=False, default=Decimal('0')
    )
    companyId = serializers.CharField(required=False, allow_blank=True)
