"""
Comprehensive test suite for Core module
Tests: API client, Error messages, Cache helpers, Company listing
"""
from decimal import Decimal
from io import StringIO
from unittest import mock
import json

import requests
from django.conf import settings
from django.core.cache import cache
from django.core.management import call_command
from django.test import SimpleTestCase, override_settings

from billing.core.api_client import (
    ApiClient, extract_error_message, get_public_client, list_companies,
)
from billing.core.cache_utils import cached_query, make_cache_key
from billing.core.exceptions import ApiError
from billing.core.test_utils import FakeApiClient, FakeResponse


@override_settings(BILLING_API_URL='http://billing.test', BILLING_API_TOKEN='secret-token')
class ApiClientTests(SimpleTestCase):
    """Test requests made by the API client"""

    def setUp(self):
        self.api = ApiClient()

    def send(self, response):
        return mock.patch.object(self.api.session, 'request', return_value=response)

    def test_bearer_token(self):
        """Test authenticated clients send the configured token"""
        self.assertEqual(self.api.session.headers['Authorization'], 'Bearer secret-token')
        self.assertEqual(self.api.session.headers['Content-Type'], 'application/json')

    def test_public_client_has_no_token(self):
        """Test the public client sends no Authorization header"""
        self.assertNotIn('Authorization', get_public_client().session.headers)

    def test_get_returns_json(self):
        with self.send(FakeResponse(200, [{'id': 1}])) as request:
            data = self.api.get('/v1/products', params={'companyId': 'c1'})

        self.assertEqual(data, [{'id': 1}])
        request.assert_called_once_with(
            'GET', 'http://billing.test/v1/products',
            params={'companyId': 'c1'}, data=None, timeout=self.api.timeout,
        )

    def test_post_encodes_decimals(self):
        """Test Decimal amounts are sent as JSON numbers"""
        with self.send(FakeResponse(201, {'ok': True})) as request:
            self.api.post('/v1/bills', data={'finalTotal': Decimal('1050.00')})

        body = json.loads(request.call_args.kwargs['data'])
        self.assertEqual(body, {'finalTotal': 1050.0})

    def test_empty_response(self):
        """Test 204 and empty bodies return None"""
        with self.send(FakeResponse(204)):
            self.assertIsNone(self.api.delete('/v1/bills/bill-no/BILL-1'))
        with self.send(FakeResponse(200, text='')):
            self.assertIsNone(self.api.get('/v1/bills'))

    def test_error_message_from_body(self):
        """Test the API's message is raised"""
        with self.send(FakeResponse(409, {'message': 'Bill number already exists'})):
            with self.assertRaises(ApiError) as ctx:
                self.api.post('/v1/bills', data={}, error_message='Failed to save bill')

        self.assertEqual(ctx.exception.message, 'Bill number already exists')
        self.assertEqual(ctx.exception.status_code, 409)

    def test_error_message_fallback(self):
        """Test the operation's message is used when the body has none"""
        with self.send(FakeResponse(500, text='<html>oops</html>')):
            with self.assertRaises(ApiError) as ctx:
                self.api.post('/v1/bills', data={}, error_message='Failed to save bill')
        self.assertEqual(ctx.exception.message, 'Failed to save bill')

    def test_network_error(self):
        """Test connection failures become ApiError"""
        with mock.patch.object(self.api.session, 'request',
                               side_effect=requests.ConnectionError('refused')):
            with self.assertRaises(ApiError) as ctx:
                self.api.get('/v1/products', error_message='Failed to fetch products')
        self.assertTrue(ctx.exception.message.startswith('Failed to fetch products'))

    def test_base_url_trailing_slash(self):
        api = ApiClient(base_url='http://billing.test/')
        self.assertEqual(api.base_url, 'http://billing.test')

    def test_retry_config(self):
        """Test only idempotent GETs are retried, on gateway errors"""
        retry = self.api.session.get_adapter('http://billing.test/v1/products').max_retries
        self.assertEqual(set(retry.status_forcelist), {502, 503, 504})
        self.assertEqual(retry.allowed_methods, frozenset({'GET'}))
        self.assertEqual(retry.total, settings.BILLING_API_MAX_RETRIES)
        self.assertEqual(retry.backoff_factor, 0.5)
        self.assertIs(self.api.session.get_adapter('https://billing.test/').max_retries, retry)

    def test_post_not_retried(self):
        """Test a failed POST is never resent"""
        retry = ApiClient(max_retries=3).session.get_adapter('http://billing.test/v1/bills').max_retries
        self.assertTrue(retry.is_retry('GET', 503))
        self.assertFalse(retry.is_retry('POST', 503))
        self.assertFalse(retry.is_retry('PUT', 502))
        self.assertFalse(retry.is_retry('GET', 500))

    def test_max_retries_override(self):
        api = ApiClient(max_retries=2)
        self.assertEqual(api.session.get_adapter('http://billing.test/').max_retries.total, 2)


class ErrorMessageTests(SimpleTestCase):
    """Test pulling messages out of error bodies"""

    def test_message_list(self):
        response = FakeResponse(400, {'message': ['name is required', 'price must be positive']})
        self.assertEqual(extract_error_message(response, 'x'), 'name is required, price must be positive')

    def test_string_body(self):
        self.assertEqual(extract_error_message(FakeResponse(400, 'Invalid token'), 'x'), 'Invalid token')

    def test_default(self):
        self.assertEqual(extract_error_message(FakeResponse(400, {'error': 'x'}), 'Failed'), 'Failed')
        self.assertEqual(extract_error_message(FakeResponse(400), 'Failed'), 'Failed')


class CacheUtilsTests(SimpleTestCase):
    """Test cache key generation and cached queries"""

    def setUp(self):
        cache.clear()

    def test_make_cache_key_stable(self):
        self.assertEqual(make_cache_key('daily_sales', 'c1', '2024-03-01'),
                         make_cache_key('daily_sales', 'c1', '2024-03-01'))
        self.assertNotEqual(make_cache_key('daily_sales', 'c1', '2024-03-01'),
                            make_cache_key('daily_sales', 'c1', '2024-03-02'))
        self.assertTrue(make_cache_key('daily_sales', 'c1').startswith('daily_sales:'))

    def test_cached_query_ignores_client(self):
        """Test different clients share the cached result"""
        calls = []

        @cached_query(cache_ttl=60, key_prefix='test_query')
        def fetch(company_id, client=None):
            calls.append(client)
            return {'company': company_id}

        self.assertEqual(fetch('c1', client='a'), {'company': 'c1'})
        self.assertEqual(fetch('c1', client='b'), {'company': 'c1'})
        self.assertEqual(calls, ['a'])

    def test_check_cache_command(self):
        """Test the cache check passes on the configured backend"""
        out = StringIO()
        call_command('check_cache', stdout=out)
        self.assertIn('Barcode cache retrieval: OK', out.getvalue())
        self.assertIn('Cache invalidation: OK', out.getvalue())


class CompanyTests(SimpleTestCase):
    """Test company listing"""

    def test_list_companies(self):
        client = FakeApiClient({('GET', '/v1/companies'): [{'id': 'c1', 'companyName': 'Handloom House'}]})
        self.assertEqual(list_companies(client=client)[0]['companyName'], 'Handloom House')

    def test_list_companies_command(self):
        client = FakeApiClient({('GET', '/v1/companies'): [{'id': 'c1', 'companyName': 'Handloom House'}]})
        out = StringIO()
        with mock.patch('billing.core.api_client.get_public_client', return_value=client):
            call_command('list_companies', stdout=out)
        self.assertIn('Handloom House', out.getvalue())
