"""
In-memory billing cart for the cashier desk.

A cart collects scanned lines, applies a percentage or flat discount and
reconciles the payments against the final total before the bill is saved.
"""
from decimal import Decimal
import logging
import re

from billing.catalog.barcodes import decode_barcode
from billing.core.exceptions import ItemNotAvailable, ProductNotFound
from billing.pricing.calculations import (
    DISCOUNT_PERCENTAGE, DISCOUNT_TYPES,
    calculate_discount, calculate_final_total, calculate_taxes,
    calculate_total_taxes, get_base_price, round_amount, round_paise, to_decimal,
)

logger = logging.getLogger(__name__)

LEADING_INTEGER_RE = re.compile(r"\s*[+-]?\d+")

PAYMENT_CASH = 'Cash'
PAYMENT_CARD = 'Card'
PAYMENT_UPI = 'UPI'
PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_CARD, PAYMENT_UPI)

PAYMENT_MODE_SINGLE = 'single'
PAYMENT_MODE_MULTIPLE = 'multiple'
PAYMENT_MODES = (PAYMENT_MODE_SINGLE, PAYMENT_MODE_MULTIPLE)


def parse_amount_input(value):
    """
    Amount typed by the cashier: digits only, anything else is dropped.

    '1,500' -> 1500, '' -> 0. Numeric values must not be negative.
    """
    if isinstance(value, str):
        digits = ''.join(ch for ch in value if ch.isdigit())
        return Decimal(digits) if digits else Decimal('0')
    amount = round_paise(value)
    if amount < 0:
        raise ValueError('Amount cannot be negative')
    return amount


def parse_quantity_input(value):
    """
    Line quantity: the leading whole number of the input, so '2.5' -> 2
    and '3abc' -> 3. Anything without one, or below 1, becomes 1.
    """
    if value is None:
        return 1
    match = LEADING_INTEGER_RE.match(str(value))
    if not match:
        return 1
    quantity = int(match.group())
    return quantity if quantity >= 1 else 1


class BillLine:
    """One product line of the bill, priced as scanned"""

    def __init__(self, product, price, original_price, price_increase=0, modified_barcode=None, quantity=1):
        self.product = product
        self.price = to_decimal(price)
        self.original_price = to_decimal(original_price)
        self.price_increase = to_decimal(price_increase)
        self.modified_barcode = modified_barcode
        self.set_quantity(quantity)

    @classmethod
    def from_decoded(cls, decoded):
        return cls(
            product=decoded['product'],
            price=decoded['price'],
            original_price=decoded['original_price'],
            price_increase=decoded['price_increase'],
            modified_barcode=decoded['modified_barcode'],
        )

    @property
    def product_id(self):
        return self.product.get('id')

    @property
    def name(self):
        return self.product.get('name', '')

    @property
    def barcode(self):
        return self.product.get('barcode')

    @property
    def product_type(self):
        return self.product.get('type')

    @property
    def unit(self):
        return self.product.get('unit')

    @property
    def scanned_barcode(self):
        """Barcode as scanned: the markup barcode if any, else the base one"""
        return self.modified_barcode or self.barcode

    @property
    def taxes(self):
        return calculate_taxes(self.product_type, self.total)

    @property
    def base_price(self):
        """Unit price before GST"""
        return get_base_price(self.product_type, self.price)

    def set_quantity(self, quantity):
        self.quantity = parse_quantity_input(quantity)
        self.total = round_amount(self.price * self.quantity)

    def __repr__(self):
        return f"<BillLine {self.scanned_barcode} x{self.quantity} = {self.total}>"


class BillingCart:
    """
    Lines, discount and payments of the bill being rung up.

    Args:
        lookup: callable mapping a base barcode to a product dict or None
        salesmen: salesman records the cashier can pick from
        company_id: tenant the bill is saved for
    """

    def __init__(self, lookup, salesmen=None, company_id=''):
        self.lookup = lookup
        self.salesmen = list(salesmen or [])
        self.company_id = company_id
        self.reset()

    def reset(self):
        """Start a new, empty bill"""
        self.lines = []
        self.customer_name = ''
        self.salesman_name = ''
        self.discount_type = DISCOUNT_PERCENTAGE
        self.discount_value = Decimal('0')
        self.payment_mode = PAYMENT_MODE_SINGLE
        self._payments = [{'method': PAYMENT_CASH, 'amount': Decimal('0')}]

    # Lines

    def find_line(self, scanned_barcode):
        """Index of the line scanned with this exact barcode, or -1"""
        for index, line in enumerate(self.lines):
            if line.scanned_barcode == scanned_barcode:
                return index
        return -1

    def scan(self, code):
        """
        Add one unit of the scanned product.

        Returns:
            The BillLine that was added or incremented, None for blank input

        Raises:
            ProductNotFound: no product matches the barcode
            ItemNotAvailable: the product is out of stock
        """
        code = (code or '').strip()
        if not code:
            return None

        decoded = decode_barcode(code, self.lookup)
        if decoded is None:
            logger.info(f"Product not found for barcode: {code}")
            raise ProductNotFound(code)

        stock = decoded['product'].get('quantity')
        if stock is not None and to_decimal(stock) <= 0:
            raise ItemNotAvailable()

        scanned_barcode = decoded['modified_barcode'] or decoded['product'].get('barcode')
        index = self.find_line(scanned_barcode)
        if index != -1:
            line = self.lines[index]
            line.set_quantity(line.quantity + 1)
            logger.debug(f"Incremented {scanned_barcode} to quantity {line.quantity}")
        else:
            line = BillLine.from_decoded(decoded)
            self.lines.append(line)
            logger.debug(f"Added {scanned_barcode} at {line.price}")
        return line

    def set_quantity(self, index, quantity):
        line = self.lines[index]
        line.set_quantity(quantity)
        return line

    def remove(self, index):
        return self.lines.pop(index)

    # Totals

    @property
    def grand_total(self):
        return round_amount(sum((line.total for line in self.lines), Decimal('0')))

    @property
    def discount(self):
        return calculate_discount(self.grand_total, self.discount_type, self.discount_value)

    @property
    def final_total(self):
        return calculate_final_total(self.grand_total, self.discount)

    @property
    def taxes(self):
        return calculate_total_taxes(self.lines)

    def set_discount(self, discount_type, discount_value):
        if discount_type not in DISCOUNT_TYPES:
            raise ValueError(f'Unknown discount type: {discount_type}')
        value = parse_amount_input(discount_value)
        self.discount_type = discount_type
        self.discount_value = value

    # Salesman and customer

    def select_salesman(self, name):
        if self.salesmen and not any(s.get('name') == name for s in self.salesmen):
            raise ValueError(f'Unknown salesman: {name}')
        self.salesman_name = name

    @property
    def salesman(self):
        return next((s for s in self.salesmen if s.get('name') == self.salesman_name), None)

    # Payments

    @property
    def payments(self):
        """Payments as they will be saved; a single payment always covers the final total"""
        if self.payment_mode == PAYMENT_MODE_SINGLE:
            method = self._payments[0]['method'] if self._payments else PAYMENT_CASH
            return [{'method': method, 'amount': self.final_total}]
        return [dict(p) for p in self._payments]

    def set_payment_mode(self, mode):
        if mode not in PAYMENT_MODES:
            raise ValueError(f'Unknown payment mode: {mode}')
        # Switching modes keeps what is currently shown
        self._payments = self.payments
        self.payment_mode = mode

    def _check_method(self, method):
        if method not in PAYMENT_METHODS:
            raise ValueError(f"Payment method must be one of {', '.join(PAYMENT_METHODS)}")

    def add_payment(self, method=PAYMENT_CASH, amount=0):
        if self.payment_mode != PAYMENT_MODE_MULTIPLE:
            raise ValueError('Switch to multiple payments to split the bill')
        self._check_method(method)
        self._payments.append({'method': method, 'amount': parse_amount_input(amount)})

    def remove_payment(self, index):
        if self.payment_mode != PAYMENT_MODE_MULTIPLE or len(self._payments) <= 1:
            raise ValueError('At least one payment is required')
        self._payments.pop(index)

    def set_payment_method(self, index, method):
        self._check_method(method)
        self._payments[index]['method'] = method

    def set_payment_amount(self, index, amount):
        if self.payment_mode == PAYMENT_MODE_SINGLE:
            raise ValueError('A single payment always covers the grand total')
        self._payments[index]['amount'] = parse_amount_input(amount)

    @property
    def total_paid(self):
        return sum((to_decimal(p['amount']) for p in self.payments), Decimal('0'))

    @property
    def payment_error(self):
        """True while the payments do not add up to the final total"""
        return self.total_paid != self.final_total
