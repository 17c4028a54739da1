"""
Comprehensive test suite for POS module
Tests: Cart scanning, Quantities, Discounts, Payments, Bill documents, Saving bills, Checkout command
"""
from decimal import Decimal
from io import StringIO
from unittest import mock
import datetime

from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings

from billing.catalog.barcodes import product_lookup
from billing.catalog.barcode_cache import (
    cache_products_list, get_cached_product, get_cached_products_list,
)
from billing.catalog.services import PRODUCTS_PATH
from billing.core.exceptions import (
    ApiError, BillValidationError, ItemNotAvailable, ProductNotFound,
)
from billing.core.test_utils import FakeApiClient, TestDataFactory
from billing.parties.services import SALESMEN_PATH
from billing.pos.cart import (
    PAYMENT_MODE_MULTIPLE, PAYMENT_MODE_SINGLE, BillingCart,
    parse_amount_input, parse_quantity_input,
)
from billing.pos.serializers import BillSerializer
from billing.pos.services import (
    BILL_BY_NUMBER_PATH, BILLS_BY_DATE_PATH, BILLS_PATH, WALK_IN_CUSTOMER,
    build_bill_document, generate_bill_no, list_bills, list_bills_by_date, new_cart, save_bill,
    search_bills,
)
from billing.pricing.calculations import DISCOUNT_CUSTOM, DISCOUNT_PERCENTAGE


def make_catalog():
    return [
        TestDataFactory.create_product(name='Silk Saree', barcode='1000A', price=1050),
        TestDataFactory.create_product(name='Stole', barcode='1001A', price='1299.6'),
        TestDataFactory.create_product(name='Brass Lamp', barcode='1002A', price=1120,
                                       product_type='Handicraft'),
        TestDataFactory.create_product(name='Sold Out', barcode='1003A', quantity=0),
    ]


class CartTestCase(SimpleTestCase):

    def setUp(self):
        self.products = make_catalog()
        self.salesmen = [TestDataFactory.create_salesman(name='Ravi')]
        self.cart = BillingCart(product_lookup(self.products), salesmen=self.salesmen,
                                company_id='company-1')


class CartScanTests(CartTestCase):
    """Test adding scanned products to the cart"""

    def test_scan_adds_line(self):
        """Test scanning a product adds one unit"""
        line = self.cart.scan('1000A')
        self.assertEqual(len(self.cart.lines), 1)
        self.assertEqual(line.quantity, 1)
        self.assertEqual(line.price, Decimal('1050'))
        self.assertEqual(line.total, Decimal('1050'))

    def test_rescan_increments_quantity(self):
        """Test scanning the same barcode again increments the line"""
        self.cart.scan('1000A')
        line = self.cart.scan('1000A')
        self.assertEqual(len(self.cart.lines), 1)
        self.assertEqual(line.quantity, 2)
        self.assertEqual(line.total, Decimal('2100'))

    def test_markup_barcode_is_separate_line(self):
        """Test the same product at a markup price gets its own line"""
        self.cart.scan('1000A')
        line = self.cart.scan('1000A010')
        self.assertEqual(len(self.cart.lines), 2)
        self.assertEqual(line.price, Decimal('2050'))
        self.assertEqual(line.scanned_barcode, '1000A010')
        self.assertEqual(line.barcode, '1000A')

        self.cart.scan('1000A010')
        self.assertEqual(self.cart.lines[1].quantity, 2)

    def test_scan_strips_whitespace(self):
        self.cart.scan('  1000A \n')
        self.assertEqual(self.cart.lines[0].barcode, '1000A')

    def test_blank_scan_ignored(self):
        """Test blank input adds nothing"""
        self.assertIsNone(self.cart.scan('   '))
        self.assertIsNone(self.cart.scan(None))
        self.assertEqual(self.cart.lines, [])

    def test_unknown_barcode(self):
        """Test unknown barcodes raise ProductNotFound"""
        with self.assertRaises(ProductNotFound) as ctx:
            self.cart.scan('9999A')
        self.assertEqual(ctx.exception.message, 'Product not found for barcode: 9999A')
        self.assertEqual(self.cart.lines, [])

    def test_out_of_stock(self):
        """Test products with no stock cannot be billed"""
        with self.assertRaises(ItemNotAvailable) as ctx:
            self.cart.scan('1003A')
        self.assertEqual(ctx.exception.message, 'Item not available')
        self.assertEqual(self.cart.lines, [])

    def test_line_total_is_rounded(self):
        """Test a line total is rounded to whole rupees"""
        line = self.cart.scan('1001A')
        self.assertEqual(line.price, Decimal('1299.6'))
        self.assertEqual(line.total, Decimal('1300'))

    def test_line_taxes_and_base_price(self):
        line = self.cart.scan('1002A')
        self.assertEqual(line.taxes['cgst'], Decimal('60'))
        self.assertEqual(line.base_price, Decimal('1000'))


class CartQuantityTests(CartTestCase):
    """Test editing line quantities"""

    def setUp(self):
        super().setUp()
        self.cart.scan('1000A')

    def test_set_quantity(self):
        line = self.cart.set_quantity(0, 3)
        self.assertEqual(line.quantity, 3)
        self.assertEqual(line.total, Decimal('3150'))

    def test_invalid_quantity_becomes_one(self):
        """Test non-numeric and non-positive quantities reset to 1"""
        for value in ('abc', '', 0, -2, None):
            self.assertEqual(self.cart.set_quantity(0, value).quantity, 1)

    def test_quantity_from_string(self):
        self.assertEqual(self.cart.set_quantity(0, '4').total, Decimal('4200'))

    def test_remove_line(self):
        self.cart.scan('1002A')
        removed = self.cart.remove(0)
        self.assertEqual(removed.barcode, '1000A')
        self.assertEqual([line.barcode for line in self.cart.lines], ['1002A'])

    def test_parse_quantity_input(self):
        self.assertEqual(parse_quantity_input('7'), 7)
        self.assertEqual(parse_quantity_input('1.5'), 1)
        self.assertEqual(parse_quantity_input('2.5'), 2)
        self.assertEqual(parse_quantity_input('3abc'), 3)
        self.assertEqual(parse_quantity_input(' 5 '), 5)
        self.assertEqual(parse_quantity_input(2.9), 2)

    def test_quantity_keeps_leading_integer(self):
        """Test typed quantities keep their leading whole number"""
        line = self.cart.set_quantity(0, '2.5')
        self.assertEqual(line.quantity, 2)
        self.assertEqual(line.total, Decimal('2100'))
        self.assertEqual(self.cart.set_quantity(0, '3abc').quantity, 3)


class CartTotalsTests(CartTestCase):
    """Test grand total, discount and taxes"""

    def setUp(self):
        super().setUp()
        self.cart.scan('1000A')
        self.cart.scan('1000A')

    def test_grand_total(self):
        self.assertEqual(self.cart.grand_total, Decimal('2100'))
        self.assertEqual(self.cart.final_total, Decimal('2100'))

    def test_percentage_discount(self):
        """Test a percentage discount of the grand total"""
        self.cart.set_discount(DISCOUNT_PERCENTAGE, '10')
        self.assertEqual(self.cart.discount, Decimal('210'))
        self.assertEqual(self.cart.final_total, Decimal('1890'))

    def test_custom_discount(self):
        self.cart.set_discount(DISCOUNT_CUSTOM, '100')
        self.assertEqual(self.cart.final_total, Decimal('2000'))

    def test_discount_larger_than_total(self):
        """Test final total never goes below zero"""
        self.cart.set_discount(DISCOUNT_CUSTOM, '5000')
        self.assertEqual(self.cart.final_total, Decimal('0'))

    def test_discount_input_keeps_digits(self):
        """Test typed discounts drop everything but digits"""
        self.cart.set_discount(DISCOUNT_CUSTOM, '1,00')
        self.assertEqual(self.cart.discount_value, Decimal('100'))

    def test_numeric_discount_rounded_to_paise(self):
        """Test numeric discounts are kept to two decimal places"""
        self.cart.set_discount(DISCOUNT_CUSTOM, 10.555)
        self.assertEqual(self.cart.discount_value, Decimal('10.56'))
        self.assertEqual(self.cart.final_total, Decimal('2089'))

    def test_unknown_discount_type(self):
        with self.assertRaises(ValueError):
            self.cart.set_discount('coupon', '10')

    def test_cart_taxes(self):
        """Test taxes are computed on line totals"""
        taxes = self.cart.taxes
        self.assertEqual(taxes['total_cgst'], Decimal('50'))
        self.assertEqual(taxes['total_sgst'], Decimal('50'))

    def test_reset(self):
        self.cart.set_discount(DISCOUNT_CUSTOM, '100')
        self.cart.reset()
        self.assertEqual(self.cart.lines, [])
        self.assertEqual(self.cart.discount_value, Decimal('0'))
        self.assertEqual(self.cart.payment_mode, PAYMENT_MODE_SINGLE)


class CartPaymentTests(CartTestCase):
    """Test single and split payments"""

    def setUp(self):
        super().setUp()
        self.cart.scan('1000A')
        self.cart.scan('1000A')

    def test_single_payment_covers_final_total(self):
        """Test a single payment always follows the final total"""
        self.assertEqual(self.cart.payments, [{'method': 'Cash', 'amount': Decimal('2100')}])
        self.cart.set_discount(DISCOUNT_CUSTOM, '100')
        self.assertEqual(self.cart.payments[0]['amount'], Decimal('2000'))
        self.assertFalse(self.cart.payment_error)

    def test_single_payment_method(self):
        self.cart.set_payment_method(0, 'UPI')
        self.assertEqual(self.cart.payments[0]['method'], 'UPI')

    def test_single_payment_amount_is_fixed(self):
        with self.assertRaises(ValueError):
            self.cart.set_payment_amount(0, '100')

    def test_split_payment(self):
        """Test split payments must add up to the final total"""
        self.cart.set_payment_mode(PAYMENT_MODE_MULTIPLE)
        self.cart.set_payment_amount(0, '1000')
        self.assertTrue(self.cart.payment_error)

        self.cart.add_payment('UPI', '1100')
        self.assertEqual(self.cart.total_paid, Decimal('2100'))
        self.assertFalse(self.cart.payment_error)

        self.cart.add_payment('Card', '1')
        self.assertTrue(self.cart.payment_error)

    def test_switching_mode_keeps_current_amount(self):
        """Test switching to split payments starts from the covering payment"""
        self.cart.set_payment_mode(PAYMENT_MODE_MULTIPLE)
        self.assertEqual(self.cart.payments, [{'method': 'Cash', 'amount': Decimal('2100')}])
        self.assertFalse(self.cart.payment_error)

    def test_add_payment_requires_multiple_mode(self):
        with self.assertRaises(ValueError):
            self.cart.add_payment('UPI', '100')

    def test_cannot_remove_last_payment(self):
        """Test at least one payment remains"""
        self.cart.set_payment_mode(PAYMENT_MODE_MULTIPLE)
        with self.assertRaises(ValueError):
            self.cart.remove_payment(0)

        self.cart.add_payment('UPI', '0')
        self.cart.remove_payment(1)
        self.assertEqual(len(self.cart.payments), 1)

    def test_unknown_payment_method(self):
        with self.assertRaises(ValueError):
            self.cart.set_payment_method(0, 'Cheque')

    def test_parse_amount_input(self):
        """Test cashier amount input"""
        self.assertEqual(parse_amount_input('1,500'), Decimal('1500'))
        self.assertEqual(parse_amount_input('Rs 250'), Decimal('250'))
        self.assertEqual(parse_amount_input(''), Decimal('0'))
        self.assertEqual(parse_amount_input(75), Decimal('75'))
        self.assertEqual(parse_amount_input(10.555), Decimal('10.56'))
        self.assertEqual(parse_amount_input(Decimal('99.999')), Decimal('100.00'))
        with self.assertRaises(ValueError):
            parse_amount_input(-5)


class CartSalesmanTests(CartTestCase):

    def test_select_salesman(self):
        self.cart.select_salesman('Ravi')
        self.assertEqual(self.cart.salesman, self.salesmen[0])

    def test_unknown_salesman(self):
        """Test only listed salesmen can be picked"""
        with self.assertRaises(ValueError):
            self.cart.select_salesman('Nobody')


class BillDocumentTests(CartTestCase):
    """Test building the bill document from a cart"""

    def setUp(self):
        super().setUp()
        self.cart.scan('1000A010')
        self.cart.scan('1002A')
        self.cart.select_salesman('Ravi')

    def test_requires_items_and_salesman(self):
        """Test empty bills and bills without salesman are rejected"""
        self.cart.salesman_name = ''
        with self.assertRaises(BillValidationError) as ctx:
            build_bill_document(self.cart)
        self.assertEqual(ctx.exception.message,
                         'Please add items and select salesman before saving.')

        self.cart.reset()
        self.cart.select_salesman('Ravi')
        with self.assertRaises(BillValidationError):
            build_bill_document(self.cart)

    def test_requires_balanced_payments(self):
        self.cart.set_payment_mode(PAYMENT_MODE_MULTIPLE)
        self.cart.set_payment_amount(0, '10')
        with self.assertRaises(BillValidationError) as ctx:
            build_bill_document(self.cart)
        self.assertEqual(ctx.exception.message, 'Total paid must match the grand total.')

    def test_document_fields(self):
        """Test bill header fields"""
        bill = build_bill_document(self.cart, bill_no='BILL-1234')
        self.assertEqual(bill['billNo'], 'BILL-1234')
        self.assertEqual(bill['customerName'], WALK_IN_CUSTOMER)
        self.assertEqual(bill['salesmanName'], 'Ravi')
        self.assertEqual(bill['salesmanId'], self.salesmen[0]['id'])
        self.assertEqual(bill['companyId'], 'company-1')
        self.assertEqual(bill['grandTotal'], Decimal('3170'))
        self.assertEqual(bill['finalTotal'], Decimal('3170'))
        self.assertEqual(bill['totalCGST'], Decimal('109'))
        self.assertEqual(bill['status'], 'completed')
        self.assertEqual(bill['payments'], [{'method': 'Cash', 'amount': Decimal('3170')}])

    def test_markup_item(self):
        """Test a markup line records both barcodes and the increase"""
        item = build_bill_document(self.cart)['items'][0]
        self.assertEqual(item['originalBarcode'], '1000A')
        self.assertEqual(item['saleBarcode'], '1000A010')
        self.assertEqual(item['originalPrice'], Decimal('1050'))
        self.assertEqual(item['salePrice'], Decimal('2050.00'))
        self.assertEqual(item['priceIncrease'], Decimal('1000'))
        self.assertEqual(item['cgst'], Decimal('49'))

    def test_plain_item(self):
        item = build_bill_document(self.cart)['items'][1]
        self.assertEqual(item['saleBarcode'], '1002A')
        self.assertEqual(item['productType'], 'Handicraft')
        self.assertEqual(item['priceIncrease'], Decimal('0'))
        self.assertEqual(item['cgst'], Decimal('60'))

    def test_customer_name(self):
        self.cart.customer_name = 'Anita'
        self.assertEqual(build_bill_document(self.cart)['customerName'], 'Anita')

    def test_date_is_utc(self):
        """Test the bill date is stamped in UTC"""
        bill = build_bill_document(self.cart)
        self.assertEqual(bill['date'].utcoffset(), datetime.timedelta(0))

    def test_generate_bill_no(self):
        bill_no = generate_bill_no()
        self.assertRegex(bill_no, r'^BILL-\d{4}$')


class BillSerializerTests(CartTestCase):
    """Test bill document validation"""

    def setUp(self):
        super().setUp()
        self.cart.scan('1000A')
        self.cart.select_salesman('Ravi')
        self.document = build_bill_document(self.cart, bill_no='BILL-1000')

    def test_valid_bill(self):
        serializer = BillSerializer(data=self.document)
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_payments_must_match(self):
        """Test unbalanced payments are rejected"""
        self.document['payments'] = [{'method': 'Cash', 'amount': Decimal('10')}]
        serializer = BillSerializer(data=self.document)
        self.assertFalse(serializer.is_valid())
        self.assertIn('payments', serializer.errors)

    def test_final_total_must_match_discount(self):
        self.document['finalTotal'] = Decimal('10')
        self.document['payments'] = [{'method': 'Cash', 'amount': Decimal('10')}]
        serializer = BillSerializer(data=self.document)
        self.assertFalse(serializer.is_valid())
        self.assertIn('finalTotal', serializer.errors)

    def test_date_sent_as_utc(self):
        """Test local bill times go on the wire in UTC"""
        ist = datetime.timezone(datetime.timedelta(hours=5, minutes=30))
        self.document['date'] = datetime.datetime(2024, 3, 1, 10, 0, tzinfo=ist)
        serializer = BillSerializer(data=self.document)
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.data['date'], '2024-03-01T04:30:00Z')

    def test_fractional_discount_valid(self):
        self.cart.set_discount(DISCOUNT_CUSTOM, 10.555)
        serializer = BillSerializer(data=build_bill_document(self.cart, bill_no='BILL-1001'))
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data['discountValue'], Decimal('10.56'))

    def test_items_required(self):
        self.document['items'] = []
        serializer = BillSerializer(data=self.document)
        self.assertFalse(serializer.is_valid())
        self.assertIn('items', serializer.errors)


@override_settings(REDIS_URL='')
class SaveBillTests(CartTestCase):
    """Test saving bills to the API"""

    def setUp(self):
        super().setUp()
        cache.clear()
        self.cart.scan('1000A')
        self.cart.select_salesman('Ravi')

    def test_save_bill_posts_document(self):
        """Test the validated bill is posted"""
        client = FakeApiClient({('POST', BILLS_PATH): lambda params, data: {**data, 'id': 'bill-1'}})
        saved = save_bill(self.cart, client=client, bill_no='BILL-2000')

        posted = client.calls_to('POST', BILLS_PATH)[0]['data']
        self.assertEqual(posted['billNo'], 'BILL-2000')
        self.assertEqual(posted['finalTotal'], Decimal('1050.00'))
        self.assertEqual(posted['items'][0]['productId'], self.products[0]['id'])
        self.assertEqual(saved['id'], 'bill-1')

    def test_save_bill_empty_response(self):
        """Test the posted document is returned when the API sends no body"""
        client = FakeApiClient({('POST', BILLS_PATH): None})
        saved = save_bill(self.cart, client=client, bill_no='BILL-2001')
        self.assertEqual(saved['billNo'], 'BILL-2001')

    def test_save_bill_api_error(self):
        """Test the API's error message reaches the caller"""
        client = FakeApiClient({
            ('POST', BILLS_PATH): ApiError('Bill number already exists', status_code=409),
        })
        with self.assertRaises(ApiError) as ctx:
            save_bill(self.cart, client=client)
        self.assertEqual(ctx.exception.message, 'Bill number already exists')

    def test_save_bill_invalidates_reports(self):
        client = FakeApiClient({('POST', BILLS_PATH): None})
        with mock.patch('billing.pos.services.invalidate_reports_cache') as invalidate:
            save_bill(self.cart, client=client)
        invalidate.assert_called_once_with()

    def test_save_bill_invalidates_sold_products(self):
        """Test cached stock of sold products is dropped after saving"""
        cache_products_list(self.products, 'company-1')
        client = FakeApiClient({('POST', BILLS_PATH): None})
        save_bill(self.cart, client=client)

        self.assertIsNone(get_cached_product('1000A', 'company-1'))
        self.assertIsNone(get_cached_products_list('company-1'))

    def test_failed_save_keeps_cache(self):
        cache_products_list(self.products, 'company-1')
        client = FakeApiClient({('POST', BILLS_PATH): ApiError('Server down', status_code=500)})
        with self.assertRaises(ApiError):
            save_bill(self.cart, client=client)
        self.assertIsNotNone(get_cached_product('1000A', 'company-1'))

    def test_list_bills(self):
        client = FakeApiClient({('GET', BILLS_PATH): [{'billNo': 'BILL-1'}]})
        self.assertEqual(list_bills(client=client), [{'billNo': 'BILL-1'}])
        self.assertEqual(len(client.calls_to('GET', BILLS_PATH)), 1)

    def test_list_bills_non_list(self):
        """Test a non-list bills response reads as no bills"""
        client = FakeApiClient({('GET', BILLS_PATH): {'message': 'none'}})
        self.assertEqual(list_bills(client=client), [])

    def test_search_bills(self):
        """Test bills match on customer name or bill number, ignoring case"""
        bills = [
            {'billNo': 'BILL-1001', 'customerName': 'Anita Rao'},
            {'billNo': 'BILL-2002', 'customerName': None},
            {'billNo': 'BILL-3003', 'customerName': 'Walk-in Customer'},
        ]
        self.assertEqual([b['billNo'] for b in search_bills(bills, 'ANITA')], ['BILL-1001'])
        self.assertEqual([b['billNo'] for b in search_bills(bills, 'bill-20')], ['BILL-2002'])
        self.assertEqual(len(search_bills(bills, '  ')), 3)
        self.assertEqual(search_bills(bills, 'nobody'), [])

    def test_list_bills_by_date(self):
        client = FakeApiClient({('GET', BILLS_BY_DATE_PATH): [{'billNo': 'BILL-1'}]})
        bills = list_bills_by_date(datetime.date(2024, 3, 1), company_id='company-1', client=client)
        self.assertEqual(bills, [{'billNo': 'BILL-1'}])
        self.assertEqual(client.calls[0]['params'], {'companyId': 'company-1', 'date': '2024-03-01'})


@override_settings(BILLING_COMPANY_ID='company-1', REDIS_URL='')
class CheckoutCommandTests(SimpleTestCase):
    """Test the checkout and delete_bill management commands"""

    def setUp(self):
        cache.clear()
        self.client = FakeApiClient({
            ('GET', PRODUCTS_PATH): make_catalog(),
            ('GET', SALESMEN_PATH): [TestDataFactory.create_salesman(name='Ravi')],
            ('POST', BILLS_PATH): lambda params, data: dict(data),
        })
        patcher = mock.patch('billing.pos.services.get_api_client', return_value=self.client)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_new_cart_loads_salesmen(self):
        cart = new_cart()
        self.assertEqual([s['name'] for s in cart.salesmen], ['Ravi'])
        self.assertEqual(cart.company_id, 'company-1')

    def test_checkout(self):
        """Test a bill is scanned and saved"""
        out = StringIO()
        call_command('checkout', '--salesman', 'Ravi', '--barcode', '1000A', '--barcode', '1000A',
                     '--discount', '10', stdout=out, stderr=StringIO())

        posted = self.client.calls_to('POST', BILLS_PATH)[0]['data']
        self.assertEqual(posted['items'][0]['quantity'], 2)
        self.assertEqual(posted['finalTotal'], Decimal('1890.00'))
        self.assertIn('Saved bill BILL-', out.getvalue())

    def test_checkout_split_payment(self):
        """Test split payments are applied"""
        call_command('checkout', '--salesman', 'Ravi', '--barcode', '1000A',
                     '--payment', 'Cash:50', '--payment', 'UPI:1000',
                     stdout=StringIO(), stderr=StringIO())
        posted = self.client.calls_to('POST', BILLS_PATH)[0]['data']
        self.assertEqual([p['method'] for p in posted['payments']], ['Cash', 'UPI'])

    def test_checkout_unbalanced_payment(self):
        with self.assertRaises(CommandError):
            call_command('checkout', '--salesman', 'Ravi', '--barcode', '1000A',
                         '--payment', 'Cash:50', stdout=StringIO(), stderr=StringIO())
        self.assertEqual(self.client.calls_to('POST', BILLS_PATH), [])

    def test_checkout_reports_unknown_barcode(self):
        """Test unknown barcodes are reported and skipped"""
        err = StringIO()
        call_command('checkout', '--salesman', 'Ravi', '--barcode', '9999A', '--barcode', '1000A',
                     stdout=StringIO(), stderr=err)
        self.assertIn('Product not found for barcode: 9999A', err.getvalue())
        self.assertEqual(len(self.client.calls_to('POST', BILLS_PATH)), 1)

    def test_checkout_dry_run(self):
        out = StringIO()
        call_command('checkout', '--salesman', 'Ravi', '--barcode', '1000A', '--dry-run',
                     stdout=out, stderr=StringIO())
        self.assertIn('Dry run', out.getvalue())
        self.assertEqual(self.client.calls_to('POST', BILLS_PATH), [])

    def test_checkout_unknown_salesman(self):
        with self.assertRaises(CommandError):
            call_command('checkout', '--salesman', 'Nobody', '--barcode', '1000A',
                         stdout=StringIO(), stderr=StringIO())

    def test_delete_bill(self):
        self.client.routes[('DELETE', f'{BILL_BY_NUMBER_PATH}/BILL-1234')] = None
        out = StringIO()
        call_command('delete_bill', 'BILL-1234', '--yes', stdout=out)
        self.assertIn('Deleted bill BILL-1234', out.getvalue())
        self.assertEqual(len(self.client.calls_to('DELETE', f'{BILL_BY_NUMBER_PATH}/BILL-1234')), 1)


@override_settings(BILLING_COMPANY_ID='company-1', REDIS_URL='')
class ListBillsCommandTests(SimpleTestCase):
    """Test the list_bills management command"""

    def setUp(self):
        self.bills = [
            {'billNo': 'BILL-1001', 'date': '2024-03-01T04:30:00Z', 'customerName': 'Anita Rao',
             'salesmanName': 'Ravi', 'finalTotal': 1890},
            {'billNo': 'BILL-2002', 'date': '2024-03-01T06:00:00Z', 'customerName': WALK_IN_CUSTOMER,
             'salesmanName': 'Ravi', 'finalTotal': 1050},
        ]
        self.client = FakeApiClient({
            ('GET', BILLS_PATH): self.bills,
            ('GET', BILLS_BY_DATE_PATH): self.bills[:1],
        })
        patcher = mock.patch('billing.pos.services.get_api_client', return_value=self.client)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_list_bills(self):
        """Test every bill is listed"""
        out = StringIO()
        call_command('list_bills', stdout=out)
        output = out.getvalue()
        self.assertIn('BILL-1001', output)
        self.assertIn('BILL-2002', output)
        self.assertIn('2 bills', output)

    def test_list_bills_search(self):
        """Test --search filters on customer name and bill number"""
        out = StringIO()
        call_command('list_bills', '--search', 'anita', stdout=out)
        self.assertIn('BILL-1001', out.getvalue())
        self.assertNotIn('BILL-2002', out.getvalue())
        self.assertIn('1 bills', out.getvalue())

        out = StringIO()
        call_command('list_bills', '--search', 'bill-2002', stdout=out)
        self.assertIn('Walk-in Customer', out.getvalue())
        self.assertNotIn('Anita Rao', out.getvalue())

    def test_list_bills_by_date(self):
        out = StringIO()
        call_command('list_bills', '--date', '2024-03-01', stdout=out)
        self.assertIn('1 bills', out.getvalue())
        self.assertEqual(self.client.calls_to('GET', BILLS_BY_DATE_PATH)[0]['params'],
                         {'companyId': 'company-1', 'date': '2024-03-01'})
        self.assertEqual(self.client.calls_to('GET', BILLS_PATH), [])

    def test_list_bills_api_error(self):
        self.client.routes[('GET', BILLS_PATH)] = ApiError('Unauthorized', status_code=401)
        with self.assertRaises(CommandError):
            call_command('list_bills', stdout=StringIO())
