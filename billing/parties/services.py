"""
Buyer and salesman operations against /v1/buyers and /v1/salesmen
"""
from django.conf import settings
from django.core.cache import cache
import logging

from billing.core.api_client import get_api_client
from billing.core.cache_utils import SALESMEN_LIST_CACHE_TTL, make_cache_key
from .serializers import BuyerSerializer, SalesmanSerializer

logger = logging.getLogger(__name__)

BUYERS_PATH = '/v1/buyers'
SALESMEN_PATH = '/v1/salesmen'


def _company_id(company_id):
    return company_id if company_id is not None else settings.BILLING_COMPANY_ID


def _salesmen_cache_key(company_id):
    return make_cache_key('salesmen_list', company_id or '-')


# Buyers

def list_buyers(client=None):
    """List all buyers"""
    client = client or get_api_client()
    buyers = client.get(BUYERS_PATH, error_message='Failed to fetch buyers')
    return buyers if isinstance(buyers, list) else []


def create_buyer(data, client=None):
    """Validate and create a buyer"""
    client = client or get_api_client()
    serializer = BuyerSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    created = client.post(BUYERS_PATH, data=serializer.data, error_message='Failed to save buyer')
    logger.info(f"Created buyer {serializer.validated_data['name']}")
    return created


def update_buyer(buyer_id, data, client=None):
    """Validate and update a buyer"""
    client = client or get_api_client()
    serializer = BuyerSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    updated = client.put(f'{BUYERS_PATH}/{buyer_id}', data=serializer.data,
                         error_message='Failed to save buyer')
    logger.info(f"Updated buyer {buyer_id}")
    return updated


def delete_buyer(buyer_id, client=None):
    """Delete a buyer"""
    client = client or get_api_client()
    client.delete(f'{BUYERS_PATH}/{buyer_id}', error_message='Failed to delete buyer')
    logger.info(f"Deleted buyer {buyer_id}")


# Salesmen

def list_salesmen(client=None, company_id=None, use_cache=True):
    """List the company's salesmen, from cache when available"""
    company_id = _company_id(company_id)
    cache_key = _salesmen_cache_key(company_id)
    if use_cache:
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

    client = client or get_api_client()
    params = {'companyId': company_id} if company_id else None
    salesmen = client.get(SALESMEN_PATH, params=params, error_message='Failed to fetch salesmen')
    if not isinstance(salesmen, list):
        salesmen = []

    cache.set(cache_key, salesmen, SALESMEN_LIST_CACHE_TTL)
    return salesmen


def invalidate_salesmen_cache(company_id=None):
    cache.delete(_salesmen_cache_key(_company_id(company_id)))


def create_salesman(data, client=None, company_id=None):
    """Validate and create a salesman"""
    company_id = _company_id(company_id)
    client = client or get_api_client()
    serializer = SalesmanSerializer(data={**data, 'companyId': data.get('companyId') or company_id})
    serializer.is_valid(raise_exception=True)
    created = client.post(SALESMEN_PATH, data=serializer.data, error_message='Failed to save salesman')
    invalidate_salesmen_cache(company_id)
    logger.info(f"Created salesman {serializer.validated_data['name']}")
    return created


def update_salesman(salesman_id, data, client=None, company_id=None):
    """Validate and update a salesman"""
    company_id = _company_id(company_id)
    client = client or get_api_client()
    serializer = SalesmanSerializer(data={**data, 'companyId': data.get('companyId') or company_id})
    serializer.is_valid(raise_exception=True)
    updated = client.put(f'{SALESMEN_PATH}/{salesman_id}', data=serializer.data,
                         error_message='Failed to save salesman')
    invalidate_salesmen_cache(company_id)
    logger.info(f"Updated salesman {salesman_id}")
    return updated


def delete_salesman(salesman_id, client=None, company_id=None):
    """Delete a salesman"""
    client = client or get_api_client()
    client.delete(f'{SALESMEN_PATH}/{salesman_id}', error_message='Failed to delete salesman')
    invalidate_salesmen_cache(company_id)
    logger.info(f"Deleted salesman {salesman_id}")


def find_salesman(salesmen, name):
    """Salesman record with the given name, or None"""
    if not name:
        return None
    return next((s for s in salesmen if s.get('name') == name), None)
