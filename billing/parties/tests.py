"""
Comprehensive test suite for Parties module
Tests: Buyer validation, Salesman validation, Salesman list caching
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import SimpleTestCase, override_settings

from billing.core.test_utils import FakeApiClient, TestDataFactory
from billing.parties.serializers import BuyerSerializer, SalesmanSerializer
from billing.parties.services import (
    BUYERS_PATH, SALESMEN_PATH, create_buyer, create_salesman, delete_buyer, delete_salesman,
    find_salesman, list_buyers, list_salesmen, update_buyer, update_salesman,
)


class BuyerTests(SimpleTestCase):
    """Test buyer validation and operations"""

    def test_buyer_requires_bank_details(self):
        """Test a buyer needs at least one bank account"""
        serializer = BuyerSerializer(data=TestDataFactory.create_buyer(bank_details=[]))
        self.assertFalse(serializer.is_valid())
        self.assertIn('bankDetails', serializer.errors)

    def test_bank_detail_fields_required(self):
        """Test incomplete bank details are rejected"""
        serializer = BuyerSerializer(data=TestDataFactory.create_buyer(
            bank_details=[{'bankName': 'State Bank'}]
        ))
        self.assertFalse(serializer.is_valid())

    def test_create_buyer(self):
        """Test a valid buyer is posted"""
        client = FakeApiClient({('POST', BUYERS_PATH): lambda params, data: {**data, 'id': 'b1'}})
        buyer = create_buyer(TestDataFactory.create_buyer(name='Weavers Guild'), client=client)
        self.assertEqual(buyer['id'], 'b1')
        self.assertEqual(buyer['name'], 'Weavers Guild')
        self.assertEqual(len(buyer['bankDetails']), 1)

    def test_update_buyer(self):
        client = FakeApiClient({('PUT', f'{BUYERS_PATH}/b1'): None})
        update_buyer('b1', TestDataFactory.create_buyer(), client=client)
        self.assertEqual(len(client.calls_to('PUT', f'{BUYERS_PATH}/b1')), 1)

    def test_delete_buyer(self):
        client = FakeApiClient({('DELETE', f'{BUYERS_PATH}/b1'): None})
        delete_buyer('b1', client=client)
        self.assertEqual(len(client.calls_to('DELETE', f'{BUYERS_PATH}/b1')), 1)

    def test_list_buyers_non_list_response(self):
        client = FakeApiClient({('GET', BUYERS_PATH): None})
        self.assertEqual(list_buyers(client=client), [])


class SalesmanSerializerTests(SimpleTestCase):
    """Test salesman validation"""

    def test_commission_rate_defaults_to_zero(self):
        serializer = SalesmanSerializer(data={'name': 'Ravi', 'phone': '98765', 'address': 'Market'})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data['commissionRate'], Decimal('0'))

    def test_commission_rate_capped(self):
        """Test commission cannot exceed 100%"""
        serializer = SalesmanSerializer(data={
            'name': 'Ravi', 'phone': '98765', 'address': 'Market', 'commissionRate': '150',
        })
        self.assertFalse(serializer.is_valid())
        self.assertIn('commissionRate', serializer.errors)


@override_settings(BILLING_COMPANY_ID='company-1')
class SalesmanServiceTests(SimpleTestCase):
    """Test salesman list caching and operations"""

    def setUp(self):
        cache.clear()
        self.salesmen = [TestDataFactory.create_salesman(name='Ravi'),
                         TestDataFactory.create_salesman(name='Meena')]
        self.client = FakeApiClient({
            ('GET', SALESMEN_PATH): self.salesmen,
            ('POST', SALESMEN_PATH): lambda params, data: {**data, 'id': 42},
        })

    def test_list_salesmen_cached(self):
        """Test the salesman list is fetched once"""
        self.assertEqual(list_salesmen(client=self.client), self.salesmen)
        list_salesmen(client=self.client)
        self.assertEqual(len(self.client.calls_to('GET', SALESMEN_PATH)), 1)
        self.assertEqual(self.client.calls[0]['params'], {'companyId': 'company-1'})

    def test_create_salesman_invalidates_list(self):
        """Test a new salesman shows up in the next listing"""
        list_salesmen(client=self.client)
        created = create_salesman({'name': 'Arjun', 'phone': '99999', 'address': 'Bazaar'},
                                  client=self.client)
        self.assertEqual(created['companyId'], 'company-1')

        list_salesmen(client=self.client)
        self.assertEqual(len(self.client.calls_to('GET', SALESMEN_PATH)), 2)

    def test_update_salesman_invalidates_list(self):
        """Test an edited salesman is refetched with the company filled in"""
        list_salesmen(client=self.client)
        self.client.routes[('PUT', f'{SALESMEN_PATH}/5')] = lambda params, data: dict(data)
        updated = update_salesman(5, {'name': 'Ravi K', 'phone': '99999', 'address': 'Bazaar'},
                                  client=self.client)
        self.assertEqual(updated['companyId'], 'company-1')
        self.assertEqual(updated['name'], 'Ravi K')

        list_salesmen(client=self.client)
        self.assertEqual(len(self.client.calls_to('GET', SALESMEN_PATH)), 2)

    def test_delete_salesman_invalidates_list(self):
        list_salesmen(client=self.client)
        self.client.routes[('DELETE', f'{SALESMEN_PATH}/5')] = None
        delete_salesman(5, client=self.client)
        list_salesmen(client=self.client)
        self.assertEqual(len(self.client.calls_to('GET', SALESMEN_PATH)), 2)

    def test_find_salesman(self):
        """Test picking a salesman by name"""
        self.assertEqual(find_salesman(self.salesmen, 'Meena'), self.salesmen[1])
        self.assertIsNone(find_salesman(self.salesmen, 'Nobody'))
        self.assertIsNone(find_salesman(self.salesmen, ''))
