"""
Bill building and bill operations against /v1/bills
"""
from django.conf import settings
from django.utils import timezone
import datetime
import logging
import random

from billing.catalog.services import get_product_by_barcode
from billing.catalog.signals import product_changed
from billing.core.api_client import get_api_client
from billing.core.cache_utils import invalidate_reports_cache
from billing.core.exceptions import BillValidationError
from billing.parties.services import list_salesmen
from billing.pricing.calculations import calculate_taxes, round_paise
from .cart import BillingCart
from .serializers import BILL_STATUS_COMPLETED, BillSerializer

logger = logging.getLogger(__name__)

BILLS_PATH = '/v1/bills'
BILLS_BY_DATE_PATH = '/v1/bills/by-company-date'
BILL_BY_NUMBER_PATH = '/v1/bills/bill-no'

WALK_IN_CUSTOMER = 'Walk-in Customer'


def generate_bill_no():
    """Bill number shown on the receipt, e.g. BILL-4821"""
    return f"BILL-{random.randint(1000, 9999)}"


def new_cart(client=None, company_id=None):
    """Cart wired to the cached catalog and the company's salesmen"""
    company_id = company_id if company_id is not None else settings.BILLING_COMPANY_ID
    client = client or get_api_client()

    def lookup(barcode):
        return get_product_by_barcode(barcode, client=client, company_id=company_id)

    salesmen = list_salesmen(client=client, company_id=company_id)
    return BillingCart(lookup, salesmen=salesmen, company_id=company_id)


def build_bill_item(line):
    """Bill item document for a cart line"""
    sale_price = round_paise(line.price)
    total = round_paise(sale_price * line.quantity)
    taxes = calculate_taxes(line.product_type, total)
    return {
        'productId': line.product_id,
        'productName': line.name,
        'originalBarcode': line.barcode,
        'saleBarcode': line.scanned_barcode,
        'productType': line.product_type,
        'unit': line.unit,
        'originalPrice': line.original_price or sale_price,
        'salePrice': sale_price,
        'total': total,
        'quantity': line.quantity,
        'cgst': taxes['cgst'],
        'sgst': taxes['sgst'],
        'priceIncrease': line.price_increase or 0,
    }


def build_bill_document(cart, bill_no=None, date=None):
    """
    Bill document for the cart's current state.

    Raises:
        BillValidationError: no lines, no salesman, or unbalanced payments
    """
    if not cart.lines or not cart.salesman_name:
        raise BillValidationError()
    if cart.payment_error:
        raise BillValidationError('Total paid must match the grand total.')

    taxes = cart.taxes
    salesman = cart.salesman
    return {
        'billNo': bill_no or generate_bill_no(),
        'date': date or timezone.now().astimezone(datetime.timezone.utc),
        'customerName': cart.customer_name or WALK_IN_CUSTOMER,
        'salesmanName': cart.salesman_name,
        'salesmanId': salesman.get('id') if salesman else None,
        'companyId': cart.company_id or '',
        'items': [build_bill_item(line) for line in cart.lines],
        'totalCGST': taxes['total_cgst'],
        'totalSGST': taxes['total_sgst'],
        'grandTotal': cart.grand_total,
        'discountType': cart.discount_type,
        'discountValue': cart.discount_value,
        'discountAmount': cart.discount,
        'finalTotal': cart.final_total,
        'payments': cart.payments,
        'status': BILL_STATUS_COMPLETED,
    }


def invalidate_sold_products(cart):
    """Drop cached stock for every product on the bill, the server just reduced it"""
    seen = set()
    for line in cart.lines:
        if line.barcode in seen:
            continue
        seen.add(line.barcode)
        product_changed.send(sender=save_bill, product=line.product, company_id=cart.company_id)


def save_bill(cart, client=None, bill_no=None):
    """
    Validate the cart's bill and POST it.

    Returns:
        The saved bill as returned by the API

    Raises:
        BillValidationError: the cart is not ready to be billed
        rest_framework.exceptions.ValidationError: the bill document is invalid
        ApiError: the API rejected the bill
    """
    client = client or get_api_client()
    document = build_bill_document(cart, bill_no=bill_no)

    serializer = BillSerializer(data=document)
    serializer.is_valid(raise_exception=True)

    saved = client.post(BILLS_PATH, data=serializer.data, error_message='Failed to save bill')
    invalidate_reports_cache()
    invalidate_sold_products(cart)
    logger.info(
        f"Saved bill {document['billNo']}: {len(document['items'])} items, "
        f"final total {document['finalTotal']}, salesman {document['salesmanName']}"
    )
    return saved if saved is not None else serializer.data


def list_bills(client=None):
    """List all bills visible to the token"""
    client = client or get_api_client()
    bills = client.get(BILLS_PATH, error_message='Failed to fetch bills')
    return bills if isinstance(bills, list) else []


def list_bills_by_date(date, company_id=None, client=None):
    """List a company's bills for one day (YYYY-MM-DD)"""
    company_id = company_id if company_id is not None else settings.BILLING_COMPANY_ID
    client = client or get_api_client()
    bills = client.get(
        BILLS_BY_DATE_PATH,
        params={'companyId': company_id, 'date': str(date)},
        error_message='Failed to fetch bills',
    )
    return bills if isinstance(bills, list) else []


def delete_bill(bill_no, client=None):
    """Delete a bill by its number"""
    client = client or get_api_client()
    client.delete(f'{BILL_BY_NUMBER_PATH}/{bill_no}', error_message='Failed to delete bill')
    invalidate_reports_cache()
    logger.info(f"Deleted bill {bill_no}")


def search_bills(bills, search):
    """Bills whose customer name or bill number contains the search text"""
    search = (search or '').strip().lower()
    if not search:
        return list(bills)
    return [
        b for b in bills
        if search in (b.get('customerName') or '').lower() or search in (b.get('billNo') or '').lower()
    ]
