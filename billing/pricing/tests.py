"""
Test suite for the GST and discount calculations
"""
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from billing.pricing.calculations import (
    DISCOUNT_CUSTOM, DISCOUNT_PERCENTAGE,
    calculate_discount, calculate_final_total, calculate_taxes,
    calculate_total_taxes, get_base_price, round_amount,
)


class TaxCalculationTests(SimpleTestCase):
    """Taxes extracted from tax-inclusive amounts"""

    def test_saree_taxes(self):
        """5% GST split evenly between CGST and SGST"""
        taxes = calculate_taxes('Saree', 1050)
        self.assertEqual(taxes['cgst'], Decimal('25'))
        self.assertEqual(taxes['sgst'], Decimal('25'))
        self.assertEqual(taxes['total_tax'], Decimal('50'))

    def test_handicraft_taxes(self):
        """12% GST for handicrafts"""
        taxes = calculate_taxes('Handicraft', 1120)
        self.assertEqual(taxes['cgst'], Decimal('60'))
        self.assertEqual(taxes['sgst'], Decimal('60'))

    def test_cloth_uses_five_percent(self):
        self.assertEqual(calculate_taxes('Cloth', 2100)['cgst'], Decimal('50'))

    def test_unknown_type_falls_back_to_saree_rates(self):
        self.assertEqual(calculate_taxes('Jewellery', 1050), calculate_taxes('Saree', 1050))
        self.assertEqual(calculate_taxes(None, 1050)['cgst'], Decimal('25'))

    def test_half_rupee_rounds_up(self):
        """21 * 2.5 / 105 = 0.5 rounds to 1"""
        taxes = calculate_taxes('Saree', 21)
        self.assertEqual(taxes['cgst'], Decimal('1'))
        self.assertEqual(taxes['sgst'], Decimal('1'))

    def test_taxes_accept_string_amounts(self):
        self.assertEqual(calculate_taxes('Saree', '1050')['cgst'], Decimal('25'))

    def test_total_taxes_rounds_per_line(self):
        """Each line is rounded before summing"""
        lines = [
            SimpleNamespace(product_type='Saree', total=Decimal('21')),
            SimpleNamespace(product_type='Saree', total=Decimal('21')),
            SimpleNamespace(product_type='Handicraft', total=Decimal('1120')),
        ]
        totals = calculate_total_taxes(lines)
        self.assertEqual(totals['total_cgst'], Decimal('62'))
        self.assertEqual(totals['total_sgst'], Decimal('62'))
        self.assertEqual(totals['total_tax'], Decimal('124'))

    def test_total_taxes_empty(self):
        totals = calculate_total_taxes([])
        self.assertEqual(totals['total_tax'], Decimal('0'))


class BasePriceTests(SimpleTestCase):
    """Price before GST"""

    def test_saree_base_price(self):
        self.assertEqual(get_base_price('Saree', 1050), Decimal('1000'))

    def test_handicraft_base_price(self):
        self.assertEqual(get_base_price('Handicraft', 1120), Decimal('1000'))

    def test_base_price_is_rounded(self):
        # 999 / 1.05 = 951.43
        self.assertEqual(get_base_price('Saree', 999), Decimal('951'))


class DiscountTests(SimpleTestCase):
    """Percentage and flat discounts"""

    def test_percentage_discount(self):
        # 10% of 1999 = 199.9
        self.assertEqual(calculate_discount(Decimal('1999'), DISCOUNT_PERCENTAGE, 10), Decimal('200'))

    def test_custom_discount_is_rounded(self):
        self.assertEqual(calculate_discount(Decimal('1999'), DISCOUNT_CUSTOM, '150.4'), Decimal('150'))

    def test_zero_discount(self):
        self.assertEqual(calculate_discount(Decimal('500'), DISCOUNT_PERCENTAGE, 0), Decimal('0'))

    def test_negative_discount_rejected(self):
        with self.assertRaises(ValueError):
            calculate_discount(Decimal('500'), DISCOUNT_CUSTOM, -5)

    def test_unknown_discount_type_rejected(self):
        with self.assertRaises(ValueError):
            calculate_discount(Decimal('500'), 'coupon', 5)

    def test_final_total_never_negative(self):
        self.assertEqual(calculate_final_total(Decimal('100'), Decimal('150')), Decimal('0'))
        self.assertEqual(calculate_final_total(Decimal('1999'), Decimal('200')), Decimal('1799'))


class RoundingTests(SimpleTestCase):

    def test_round_amount_half_up(self):
        self.assertEqual(round_amount('2.5'), Decimal('3'))
        self.assertEqual(round_amount('2.49'), Decimal('2'))
        self.assertEqual(round_amount(1299.6), Decimal('1300'))

    def test_round_amount_rejects_garbage(self):
        with self.assertRaises(ValueError):
            round_amount('abc')
