"""
Product operations against /v1/products
"""
from django.conf import settings
import logging

from billing.core.api_client import get_api_client
from .barcode_cache import (
    cache_products_list, get_cached_product, get_cached_products_list,
)
from .barcodes import generate_barcode
from .serializers import ProductSerializer
from .signals import product_changed

logger = logging.getLogger(__name__)

PRODUCTS_PATH = '/v1/products'


def _company_id(company_id):
    return company_id if company_id is not None else settings.BILLING_COMPANY_ID


def list_products(client=None, company_id=None, use_cache=True):
    """
    List the company's products, from cache when available.

    A fresh list from the API refreshes the barcode index.
    """
    company_id = _company_id(company_id)
    if use_cache:
        cached = get_cached_products_list(company_id)
        if cached is not None:
            return cached

    client = client or get_api_client()
    params = {'companyId': company_id} if company_id else None
    products = client.get(PRODUCTS_PATH, params=params, error_message='Failed to fetch products')
    if not isinstance(products, list):
        products = []

    cache_products_list(products, company_id)
    logger.info(f"Loaded {len(products)} products for company {company_id or '-'}")
    return products


def get_product_by_barcode(barcode, client=None, company_id=None):
    """Find a product by its exact base barcode"""
    company_id = _company_id(company_id)
    product = get_cached_product(barcode, company_id)
    if product is not None:
        return product

    # Cache miss: the barcode may be new since the list was cached
    for product in list_products(client=client, company_id=company_id, use_cache=False):
        if product.get('barcode') == barcode:
            return product
    return None


def get_product(product_id, client=None, company_id=None):
    """Find a product by id in the company catalog"""
    for product in list_products(client=client, company_id=company_id):
        if str(product.get('id')) == str(product_id):
            return product
    return None


def create_product(data, client=None, company_id=None):
    """
    Validate and create a product.

    A new product gets the next base barcode when none is given.
    """
    company_id = _company_id(company_id)
    client = client or get_api_client()

    serializer = ProductSerializer(data={**data, 'companyId': data.get('companyId') or company_id})
    serializer.is_valid(raise_exception=True)
    payload = dict(serializer.validated_data)

    if not payload.get('barcode'):
        products = list_products(client=client, company_id=company_id, use_cache=False)
        payload['barcode'] = generate_barcode(products)

    created = client.post(PRODUCTS_PATH, data=payload, error_message='Failed to save product')
    product = created if isinstance(created, dict) else payload
    product_changed.send(sender=create_product, product=product, company_id=company_id)
    logger.info(f"Created product {payload['name']} with barcode {payload['barcode']}")
    return product


def update_product(product_id, data, client=None, company_id=None):
    """Validate and update a product, keeping the barcode it already has"""
    company_id = _company_id(company_id)
    client = client or get_api_client()

    serializer = ProductSerializer(data={**data, 'companyId': data.get('companyId') or company_id})
    serializer.is_valid(raise_exception=True)
    payload = dict(serializer.validated_data)

    existing = get_product(product_id, client=client, company_id=company_id)
    if existing and existing.get('barcode'):
        payload['barcode'] = existing['barcode']
    elif not payload.get('barcode'):
        payload['barcode'] = generate_barcode(list_products(client=client, company_id=company_id))

    updated = client.put(f'{PRODUCTS_PATH}/{product_id}', data=payload,
                         error_message='Failed to save product')
    product = updated if isinstance(updated, dict) else {**payload, 'id': product_id}
    product_changed.send(sender=update_product, product=product, company_id=company_id)
    logger.info(f"Updated product {product_id}")
    return product


def delete_product(product_id, client=None, company_id=None):
    """Delete a product"""
    company_id = _company_id(company_id)
    client = client or get_api_client()

    existing = get_product(product_id, client=client, company_id=company_id)
    client.delete(f'{PRODUCTS_PATH}/{product_id}', error_message='Failed to delete product')
    product_changed.send(sender=delete_product, product=existing or {'id': product_id},
                         company_id=company_id)
    logger.info(f"Deleted product {product_id}")
