"""
Barcode helpers for the cashier desk.

Base barcodes end in 'A' (1000A, 1001A, ...). A label printed at a higher
price appends a 3-digit markup code to the base barcode: the code is the
price increase in hundreds of rupees, so 1000A010 is product 1000A sold
for 1000 rupees above its catalog price.
"""
import re

from billing.pricing.calculations import round_amount, to_decimal

MARKUP_BARCODE_RE = re.compile(r'^(.+A)(\d{3})$')
MARKUP_STEP = 100  # rupees per markup code unit
MARKUP_CODE_DIGITS = 3
MAX_MARKUP_CODE = 10 ** MARKUP_CODE_DIGITS - 1
BARCODE_START = 1000


def product_lookup(products):
    """Build a barcode -> product lookup function over a product list"""
    index = {}
    for product in products:
        barcode = product.get('barcode')
        if barcode and barcode not in index:
            index[barcode] = product
    return index.get


def split_markup_barcode(code):
    """
    Split a scanned code into (base_barcode, price_increase).

    Returns (code, 0) when the code carries no markup suffix.
    """
    match = MARKUP_BARCODE_RE.match(code)
    if not match:
        return code, 0
    return match.group(1), int(match.group(2)) * MARKUP_STEP


def decode_barcode(code, lookup):
    """
    Resolve a scanned code into a priced product.

    Args:
        code: scanned barcode, possibly carrying a markup suffix
        lookup: callable mapping a base barcode to a product dict (or None)

    Returns:
        dict with 'product', 'price', 'original_price', 'price_increase'
        and 'modified_barcode', or None if no product matches
    """
    base_barcode, price_increase = split_markup_barcode(code)

    if base_barcode != code:
        product = lookup(base_barcode)
        if product is not None:
            original_price = round_amount(product.get('price'))
            return {
                'product': product,
                'price': original_price + price_increase,
                'original_price': original_price,
                'price_increase': to_decimal(price_increase),
                'modified_barcode': code,
            }

    # Plain barcode, or a markup-shaped code that is itself a catalog barcode
    product = lookup(code)
    if product is None:
        return None
    return {
        'product': product,
        'price': to_decimal(product.get('price')),
        'original_price': round_amount(product.get('price')),
        'price_increase': to_decimal(0),
        'modified_barcode': None,
    }


def encode_markup_barcode(barcode, price_increase):
    """
    Barcode to print on a label that sells `barcode` for `price_increase` more.

    The increase is truncated to whole hundreds, the resolution of the code.
    """
    if not barcode:
        raise ValueError('Barcode is required')
    increase = to_decimal(price_increase)
    if increase < 0:
        raise ValueError('Price increase cannot be negative')

    code = int(increase // MARKUP_STEP)
    if code > MAX_MARKUP_CODE:
        raise ValueError(
            f'Price increase {increase} exceeds the largest markup '
            f'({MAX_MARKUP_CODE * MARKUP_STEP})'
        )
    return f"{barcode}{code:0{MARKUP_CODE_DIGITS}d}"


def markup_label(product, price_increase):
    """Barcode and display price for an increased-price label"""
    increase = to_decimal(price_increase)
    return {
        'barcode': encode_markup_barcode(product['barcode'], increase),
        'price': to_decimal(product.get('price')) + increase,
    }


def generate_barcode(products):
    """Next base barcode, numbered after the existing catalog"""
    return f"{BARCODE_START + len(products)}A"
