"""
Comprehensive test suite for Catalog module
Tests: Barcode decoding, Markup barcodes, Product validation, Barcode cache, Product services
"""
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings

from billing.core.test_utils import FakeApiClient, TestDataFactory
from billing.catalog.barcode_cache import (
    cache_products_list, get_cached_product, get_cached_products_list,
)
from billing.catalog.barcodes import (
    decode_barcode, encode_markup_barcode, generate_barcode, markup_label,
    product_lookup, split_markup_barcode,
)
from billing.catalog.serializers import ProductSerializer
from billing.catalog.services import (
    PRODUCTS_PATH, create_product, delete_product, get_product_by_barcode,
    list_products, update_product,
)
from billing.catalog.signals import product_changed
from billing.core.exceptions import ApiError
from billing.parties.services import SALESMEN_PATH, list_salesmen


class BarcodeDecodingTests(SimpleTestCase):
    """Test resolving scanned codes into priced products"""

    def setUp(self):
        self.saree = TestDataFactory.create_product(name='Silk Saree', barcode='1000A', price=1050)
        self.stole = TestDataFactory.create_product(name='Stole', barcode='1001A', price='1299.6')
        self.lookup = product_lookup([self.saree, self.stole])

    def test_plain_barcode(self):
        """Test a plain barcode sells at the catalog price"""
        decoded = decode_barcode('1000A', self.lookup)
        self.assertIs(decoded['product'], self.saree)
        self.assertEqual(decoded['price'], Decimal('1050'))
        self.assertEqual(decoded['price_increase'], Decimal('0'))
        self.assertIsNone(decoded['modified_barcode'])

    def test_plain_barcode_keeps_unrounded_price(self):
        """Test the sale price is not rounded, the original price is"""
        decoded = decode_barcode('1001A', self.lookup)
        self.assertEqual(decoded['price'], Decimal('1299.6'))
        self.assertEqual(decoded['original_price'], Decimal('1300'))

    def test_markup_barcode(self):
        """Test a markup suffix adds hundreds of rupees"""
        decoded = decode_barcode('1000A010', self.lookup)
        self.assertIs(decoded['product'], self.saree)
        self.assertEqual(decoded['price'], Decimal('2050'))
        self.assertEqual(decoded['original_price'], Decimal('1050'))
        self.assertEqual(decoded['price_increase'], Decimal('1000'))
        self.assertEqual(decoded['modified_barcode'], '1000A010')

    def test_markup_on_unrounded_price(self):
        """Test markup is added to the rounded catalog price"""
        decoded = decode_barcode('1001A001', self.lookup)
        self.assertEqual(decoded['price'], Decimal('1400'))

    def test_zero_markup_is_still_a_markup_barcode(self):
        """Test 000 suffix keeps the scanned code"""
        decoded = decode_barcode('1000A000', self.lookup)
        self.assertEqual(decoded['price'], Decimal('1050'))
        self.assertEqual(decoded['modified_barcode'], '1000A000')

    def test_markup_shaped_catalog_barcode(self):
        """Test a markup-shaped code with no base product falls back to an exact match"""
        odd = TestDataFactory.create_product(barcode='XA123', price=500)
        decoded = decode_barcode('XA123', product_lookup([odd]))
        self.assertIs(decoded['product'], odd)
        self.assertEqual(decoded['price'], Decimal('500'))
        self.assertIsNone(decoded['modified_barcode'])

    def test_unknown_barcode(self):
        """Test unknown codes decode to None"""
        self.assertIsNone(decode_barcode('9999A', self.lookup))
        self.assertIsNone(decode_barcode('9999A010', self.lookup))

    def test_split_markup_barcode(self):
        """Test splitting base barcode and increase"""
        self.assertEqual(split_markup_barcode('1000A025'), ('1000A', 2500))
        self.assertEqual(split_markup_barcode('1000A'), ('1000A', 0))
        self.assertEqual(split_markup_barcode('1000A01'), ('1000A01', 0))

    def test_lookup_keeps_first_duplicate(self):
        """Test duplicate barcodes resolve to the first product"""
        duplicate = TestDataFactory.create_product(barcode='1000A', price=10)
        lookup = product_lookup([self.saree, duplicate])
        self.assertIs(lookup('1000A'), self.saree)


class MarkupBarcodeTests(SimpleTestCase):
    """Test building barcodes for increased-price labels"""

    def test_encode_hundreds(self):
        """Test the code is the increase in hundreds"""
        self.assertEqual(encode_markup_barcode('1000A', 1000), '1000A010')
        self.assertEqual(encode_markup_barcode('1000A', 0), '1000A000')

    def test_encode_truncates_to_hundreds(self):
        """Test increases below the next hundred are dropped"""
        self.assertEqual(encode_markup_barcode('1000A', 150), '1000A001')
        self.assertEqual(encode_markup_barcode('1000A', 99), '1000A000')

    def test_encode_largest_markup(self):
        self.assertEqual(encode_markup_barcode('1000A', 99999), '1000A999')

    def test_encode_rejects_out_of_range(self):
        """Test negative and too large increases"""
        with self.assertRaises(ValueError):
            encode_markup_barcode('1000A', -100)
        with self.assertRaises(ValueError):
            encode_markup_barcode('1000A', 100000)
        with self.assertRaises(ValueError):
            encode_markup_barcode('', 100)

    def test_encoded_barcode_decodes_back(self):
        """Test a printed markup label scans at the increased price"""
        product = TestDataFactory.create_product(barcode='1005A', price=2000)
        code = encode_markup_barcode('1005A', 300)
        decoded = decode_barcode(code, product_lookup([product]))
        self.assertEqual(decoded['price'], Decimal('2300'))

    def test_markup_label(self):
        """Test label shows the catalog price plus the increase"""
        product = TestDataFactory.create_product(barcode='1000A', price=1050)
        label = markup_label(product, 250)
        self.assertEqual(label['barcode'], '1000A002')
        self.assertEqual(label['price'], Decimal('1300'))

    def test_generate_barcode(self):
        """Test new barcodes number after the catalog size"""
        self.assertEqual(generate_barcode([]), '1000A')
        products = [TestDataFactory.create_product() for _ in range(3)]
        self.assertEqual(generate_barcode(products), '1003A')


class ProductSerializerTests(SimpleTestCase):
    """Test product validation"""

    def product_data(self, **overrides):
        data = {
            'name': 'Kanjivaram Saree',
            'type': 'Saree',
            'cost': '800',
            'price': '1050',
            'quantity': '5',
            'buyerId': '7',
        }
        data.update(overrides)
        return data

    def test_unit_defaults_to_type_unit(self):
        """Test missing unit takes the product type's default"""
        serializer = ProductSerializer(data=self.product_data(type='Cloth'))
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data['unit'], 'meters')

    def test_handicraft_sold_in_grams(self):
        serializer = ProductSerializer(data=self.product_data(type='Handicraft', unit='grams'))
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_unit_must_match_type(self):
        """Test a saree cannot be sold in meters"""
        serializer = ProductSerializer(data=self.product_data(unit='meters'))
        self.assertFalse(serializer.is_valid())
        self.assertIn('unit', serializer.errors)

    def test_unknown_type_rejected(self):
        serializer = ProductSerializer(data=self.product_data(type='Jewellery'))
        self.assertFalse(serializer.is_valid())
        self.assertIn('type', serializer.errors)

    def test_buyer_required(self):
        """Test every product needs a buyer"""
        data = self.product_data()
        del data['buyerId']
        serializer = ProductSerializer(data=data)
        self.assertFalse(serializer.is_valid())
        self.assertIn('buyerId', serializer.errors)

    def test_negative_price_rejected(self):
        serializer = ProductSerializer(data=self.product_data(price='-1'))
        self.assertFalse(serializer.is_valid())
        self.assertIn('price', serializer.errors)


class BarcodeCacheTests(SimpleTestCase):
    """Test product list and barcode index caching"""

    def setUp(self):
        cache.clear()

    def test_list_cache_indexes_barcodes(self):
        """Test caching a list makes every barcode a cache hit"""
        products = [TestDataFactory.create_product(barcode='1000A'),
                    TestDataFactory.create_product(barcode='1001A')]
        cache_products_list(products, 'company-1')

        self.assertEqual(get_cached_products_list('company-1'), products)
        self.assertEqual(get_cached_product('1001A', 'company-1'), products[1])

    def test_cache_is_per_company(self):
        """Test companies do not share cached catalogs"""
        cache_products_list([TestDataFactory.create_product(barcode='1000A')], 'company-1')
        self.assertIsNone(get_cached_products_list('company-2'))
        self.assertIsNone(get_cached_product('1000A', 'company-2'))

    def test_product_changed_signal_invalidates(self):
        """Test the product_changed signal drops the cached list and barcode"""
        product = TestDataFactory.create_product(barcode='1000A')
        cache_products_list([product], 'company-1')

        product_changed.send(sender=self.__class__, product=product, company_id='company-1')

        self.assertIsNone(get_cached_products_list('company-1'))
        self.assertIsNone(get_cached_product('1000A', 'company-1'))


@override_settings(BILLING_COMPANY_ID='company-1')
class ProductServiceTests(SimpleTestCase):
    """Test product operations against the API"""

    def setUp(self):
        cache.clear()
        self.products = [
            TestDataFactory.create_product(barcode='1000A'),
            TestDataFactory.create_product(barcode='1001A'),
        ]
        self.client = FakeApiClient({('GET', PRODUCTS_PATH): self.products})

    def test_list_products_filters_by_company(self):
        """Test products are fetched for the configured company"""
        products = list_products(client=self.client)
        self.assertEqual(products, self.products)
        self.assertEqual(self.client.calls[0]['params'], {'companyId': 'company-1'})

    def test_list_products_uses_cache(self):
        """Test a second listing does not call the API"""
        list_products(client=self.client)
        list_products(client=self.client)
        self.assertEqual(len(self.client.calls_to('GET', PRODUCTS_PATH)), 1)

    def test_list_products_refresh(self):
        list_products(client=self.client)
        list_products(client=self.client, use_cache=False)
        self.assertEqual(len(self.client.calls_to('GET', PRODUCTS_PATH)), 2)

    def test_list_products_non_list_response(self):
        """Test an unexpected body gives an empty catalog"""
        client = FakeApiClient({('GET', PRODUCTS_PATH): {'message': 'oops'}})
        self.assertEqual(list_products(client=client), [])

    def test_get_product_by_barcode_from_cache(self):
        """Test barcode lookups hit the cache after a listing"""
        list_products(client=self.client)
        product = get_product_by_barcode('1001A', client=self.client)
        self.assertEqual(product['barcode'], '1001A')
        self.assertEqual(len(self.client.calls), 1)

    def test_get_product_by_barcode_refreshes_on_miss(self):
        """Test a cache miss re-fetches the catalog"""
        self.assertEqual(get_product_by_barcode('1000A', client=self.client)['barcode'], '1000A')
        self.assertIsNone(get_product_by_barcode('2000A', client=self.client))

    def test_create_product_generates_barcode(self):
        """Test a new product gets the next base barcode"""
        client = FakeApiClient({
            ('GET', PRODUCTS_PATH): self.products,
            ('POST', PRODUCTS_PATH): lambda params, data: {**data, 'id': 99},
        })
        product = create_product({
            'name': 'Cotton Cloth', 'type': 'Cloth', 'cost': '100', 'price': '210',
            'quantity': '40', 'buyerId': '3',
        }, client=client)

        posted = client.calls_to('POST', PRODUCTS_PATH)[0]['data']
        self.assertEqual(posted['barcode'], '1002A')
        self.assertEqual(posted['unit'], 'meters')
        self.assertEqual(posted['companyId'], 'company-1')
        self.assertEqual(product['id'], 99)

    def test_create_product_invalidates_cache(self):
        """Test creating a product drops the cached list"""
        list_products(client=self.client)
        client = FakeApiClient({('POST', PRODUCTS_PATH): None})
        create_product({
            'name': 'Brass Lamp', 'type': 'Handicraft', 'cost': '300', 'price': '560',
            'quantity': '2', 'buyerId': '3', 'barcode': '5000A',
        }, client=client)
        self.assertIsNone(get_cached_products_list('company-1'))

    def test_update_product_keeps_barcode(self):
        """Test updating never changes an existing barcode"""
        product_id = self.products[0]['id']
        client = FakeApiClient({
            ('GET', PRODUCTS_PATH): self.products,
            ('PUT', f'{PRODUCTS_PATH}/{product_id}'): None,
        })
        product = update_product(product_id, {
            'name': 'Renamed', 'type': 'Saree', 'cost': '800', 'price': '1100',
            'quantity': '3', 'buyerId': '1', 'barcode': '7777A',
        }, client=client)

        self.assertEqual(product['barcode'], '1000A')
        self.assertEqual(product['id'], product_id)

    def test_delete_product(self):
        """Test deleting calls the product endpoint and drops the cache"""
        product_id = self.products[1]['id']
        list_products(client=self.client)
        self.client.routes[('DELETE', f'{PRODUCTS_PATH}/{product_id}')] = None

        delete_product(product_id, client=self.client)

        self.assertEqual(len(self.client.calls_to('DELETE', f'{PRODUCTS_PATH}/{product_id}')), 1)
        self.assertIsNone(get_cached_product('1001A', 'company-1'))


@override_settings(BILLING_COMPANY_ID='company-1')
class CatalogCommandTests(SimpleTestCase):
    """Test the catalog management commands"""

    def setUp(self):
        cache.clear()
        self.client = FakeApiClient({
            ('GET', PRODUCTS_PATH): [
                TestDataFactory.create_product(name='Silk Saree', barcode='1000A', price=1050),
                TestDataFactory.create_product(name='Brass Lamp', barcode='1001A', price=1120,
                                               product_type='Handicraft'),
            ],
        })
        patcher = mock.patch('billing.catalog.services.get_api_client', return_value=self.client)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_markup_barcode_command(self):
        """Test the label barcode and price are printed"""
        out = StringIO()
        call_command('markup_barcode', '1000A', '500', stdout=out)
        self.assertIn('Label barcode: 1000A005', out.getvalue())
        self.assertIn('price: 1550', out.getvalue())

    def test_markup_barcode_unknown_product(self):
        with self.assertRaises(CommandError):
            call_command('markup_barcode', '9999A', '500', stdout=StringIO())

    def test_list_products_command(self):
        """Test products are listed with base price"""
        out = StringIO()
        call_command('list_products', '--search', 'lamp', stdout=out)
        output = out.getvalue()
        self.assertIn('Brass Lamp', output)
        self.assertNotIn('Silk Saree', output)
        self.assertIn('1 products', output)

    def test_sync_catalog_command(self):
        """Test products and salesmen are fetched fresh and cached"""
        cache_products_list([], 'company-1')
        self.client.routes[('GET', SALESMEN_PATH)] = [TestDataFactory.create_salesman(name='Ravi')]
        out = StringIO()
        with mock.patch('billing.catalog.management.commands.sync_catalog.get_api_client',
                        return_value=self.client):
            call_command('sync_catalog', stdout=out)

        self.assertIn('Cached 2 products and 1 salesmen for company company-1', out.getvalue())
        self.assertEqual(get_cached_product('1001A', 'company-1')['name'], 'Brass Lamp')
        self.assertEqual(len(get_cached_products_list('company-1')), 2)

        list_salesmen(client=self.client)
        self.assertEqual(len(self.client.calls_to('GET', SALESMEN_PATH)), 1)
        self.assertEqual(self.client.calls_to('GET', PRODUCTS_PATH)[0]['params'], {'companyId': 'company-1'})

    def test_sync_catalog_api_error(self):
        self.client.routes[('GET', PRODUCTS_PATH)] = ApiError('Unauthorized', status_code=401)
        with mock.patch('billing.catalog.management.commands.sync_catalog.get_api_client',
                        return_value=self.client):
            with self.assertRaises(CommandError):
                call_command('sync_catalog', stdout=StringIO())

    def test_add_product_invalid(self):
        """Test validation errors are reported"""
        with self.assertRaises(CommandError):
            call_command('add_product', '--name', 'Saree', '--type', 'Saree', '--unit', 'meters',
                         '--cost', '100', '--price', '200', '--quantity', '1', '--buyer-id', '1',
                         stdout=StringIO())
