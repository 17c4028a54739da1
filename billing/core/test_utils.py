"""
Test utilities and factories for creating test data
"""
import copy
import json
import random
import string

_MISSING = object()


class TestDataFactory:
    """Factory class for API records as the billing API returns them"""

    _next_id = 1

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @classmethod
    def next_id(cls):
        cls._next_id += 1
        return cls._next_id

    @classmethod
    def create_product(cls, name=None, barcode=None, price=1050, product_type='Saree',
                       unit='pieces', quantity=10, cost=800, buyer_id='1', company_id='company-1'):
        """Create a product record"""
        product_id = cls.next_id()
        return {
            'id': product_id,
            'name': name or f'Product_{cls.random_string(6)}',
            'type': product_type,
            'unit': unit,
            'cost': cost,
            'price': price,
            'quantity': quantity,
            'barcode': barcode or f'{1000 + product_id}A',
            'buyerId': buyer_id,
            'companyId': company_id,
        }

    @classmethod
    def create_salesman(cls, name=None, commission_rate=5, company_id='company-1'):
        """Create a salesman record"""
        return {
            'id': cls.next_id(),
            'name': name or f'Salesman_{cls.random_string(6)}',
            'phone': '9876543210',
            'address': 'Main Road',
            'commissionRate': commission_rate,
            'companyId': company_id,
        }

    @staticmethod
    def create_buyer(name=None, bank_details=None):
        """Create buyer form data"""
        if bank_details is None:
            bank_details = [{
                'bankName': 'State Bank',
                'accountNumber': '1234567890',
                'ifscCode': 'SBIN0001234',
                'accountHolderName': 'Weaver Co',
            }]
        return {
            'name': name or f'Buyer_{TestDataFactory.random_string(6)}',
            'address': 'Handloom Street',
            'bankDetails': bank_details,
        }


class FakeApiClient:
    """
    Stand-in for ApiClient that answers from a route table.

    routes maps (method, path) to a response value, an exception to raise,
    or a callable taking (params, data).
    """

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []

    def request(self, method, path, params=None, data=None, error_message=None):
        self.calls.append({'method': method, 'path': path, 'params': params, 'data': data})
        response = self.routes.get((method, path))
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params, data)
        return copy.deepcopy(response)

    def get(self, path, params=None, error_message=None):
        return self.request('GET', path, params=params, error_message=error_message)

    def post(self, path, data=None, error_message=None):
        return self.request('POST', path, data=data, error_message=error_message)

    def put(self, path, data=None, error_message=None):
        return self.request('PUT', path, data=data, error_message=error_message)

    def delete(self, path, error_message=None):
        return self.request('DELETE', path, error_message=error_message)

    def calls_to(self, method, path):
        return [c for c in self.calls if c['method'] == method and c['path'] == path]


class FakeResponse:
    """Minimal requests.Response look-alike"""

    def __init__(self, status_code=200, json_data=_MISSING, text=None):
        self.status_code = status_code
        self._json = json_data
        if text is None:
            text = '' if json_data is _MISSING else json.dumps(json_data)
        self.text = text
        self.content = text.encode()

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json is _MISSING:
            raise ValueError('No JSON body')
        return self._json
