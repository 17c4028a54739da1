"""
GST and discount arithmetic for bill lines

Catalog prices are tax inclusive. CGST and SGST are extracted from the
inclusive amount using the rates of the product type, and every amount is
rounded to whole rupees.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

PRODUCT_TYPE_SAREE = 'Saree'
PRODUCT_TYPE_CLOTH = 'Cloth'
PRODUCT_TYPE_HANDICRAFT = 'Handicraft'

# Percent rates per product type (total GST = cgst + sgst)
TAX_RATES = {
    PRODUCT_TYPE_SAREE: {'cgst': Decimal('2.5'), 'sgst': Decimal('2.5')},  # 5% GST
    PRODUCT_TYPE_CLOTH: {'cgst': Decimal('2.5'), 'sgst': Decimal('2.5')},  # 5% GST
    PRODUCT_TYPE_HANDICRAFT: {'cgst': Decimal('6'), 'sgst': Decimal('6')},  # 12% GST
}
DEFAULT_TAX_TYPE = PRODUCT_TYPE_SAREE

DISCOUNT_PERCENTAGE = 'percentage'
DISCOUNT_CUSTOM = 'custom'
DISCOUNT_TYPES = (DISCOUNT_PERCENTAGE, DISCOUNT_CUSTOM)

ONE_RUPEE = Decimal('1')
ONE_PAISA = Decimal('0.01')


def to_decimal(value, default=Decimal('0')):
    """Convert API/user input to Decimal, falling back to default when empty"""
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f'Invalid amount: {value!r}')


def round_amount(value):
    """Round to whole rupees, halves away from zero"""
    return to_decimal(value).quantize(ONE_RUPEE, rounding=ROUND_HALF_UP)


def round_paise(value):
    """Round to two decimal places"""
    return to_decimal(value).quantize(ONE_PAISA, rounding=ROUND_HALF_UP)


def get_tax_rates(product_type):
    """Rates for a product type, Saree rates for unknown types"""
    return TAX_RATES.get(product_type, TAX_RATES[DEFAULT_TAX_TYPE])


def calculate_taxes(product_type, amount):
    """
    Extract CGST and SGST from a tax-inclusive amount.

    Returns:
        dict with 'cgst', 'sgst' and 'total_tax' in whole rupees
    """
    rates = get_tax_rates(product_type)
    total_rate = rates['cgst'] + rates['sgst']
    amount = to_decimal(amount)

    cgst = round_amount(amount * rates['cgst'] / (100 + total_rate))
    sgst = round_amount(amount * rates['sgst'] / (100 + total_rate))
    return {
        'cgst': cgst,
        'sgst': sgst,
        'total_tax': cgst + sgst,
    }


def calculate_total_taxes(lines):
    """
    Sum taxes over bill lines.

    Each line needs `product_type` and `total` attributes. Taxes are
    rounded per line before summing.
    """
    total_cgst = Decimal('0')
    total_sgst = Decimal('0')

    for line in lines:
        taxes = calculate_taxes(line.product_type, line.total)
        total_cgst += taxes['cgst']
        total_sgst += taxes['sgst']

    return {
        'total_cgst': total_cgst,
        'total_sgst': total_sgst,
        'total_tax': total_cgst + total_sgst,
    }


def get_base_price(product_type, tax_inclusive_price):
    """Price before GST for a tax-inclusive price"""
    rates = get_tax_rates(product_type)
    total_rate = rates['cgst'] + rates['sgst']
    return round_amount(to_decimal(tax_inclusive_price) / (1 + total_rate / 100))


def calculate_discount(grand_total, discount_type, discount_value):
    """Discount amount in rupees for a percentage or a flat (custom) discount"""
    if discount_type not in DISCOUNT_TYPES:
        raise ValueError(f'Unknown discount type: {discount_type}')

    discount_value = to_decimal(discount_value)
    if discount_value < 0:
        raise ValueError('Discount cannot be negative')

    if discount_type == DISCOUNT_PERCENTAGE:
        return round_amount(to_decimal(grand_total) * discount_value / 100)
    return round_amount(discount_value)


def calculate_final_total(grand_total, discount):
    """Bill total after discount, never below zero"""
    return max(to_decimal(grand_total) - to_decimal(discount), Decimal('0'))
