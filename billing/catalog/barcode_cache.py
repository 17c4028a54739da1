"""
Catalog caching for fast barcode lookups at the cashier desk.

The product list fetched from the API is cached per company, and every
product is also indexed by its barcode so a scan does not hit the API.
"""
from django.core.cache import cache
from django.dispatch import receiver

from billing.core.cache_utils import PRODUCTS_LIST_CACHE_TTL
from .signals import product_changed
import logging

logger = logging.getLogger(__name__)

# Cache key prefixes
BARCODE_KEY_PREFIX = 'barcode:'
PRODUCTS_LIST_KEY_PREFIX = 'products_list:'

def get_barcode_cache_key(barcode_value: str, company_id: str = '') -> str:
    """Get cache key for barcode lookup"""
    return f"{BARCODE_KEY_PREFIX}{company_id or '-'}:{barcode_value}"


def get_products_list_cache_key(company_id: str = '') -> str:
    """Get cache key for a company's product list"""
    return f"{PRODUCTS_LIST_KEY_PREFIX}{company_id or '-'}"


def cache_products_list(products: list, company_id: str = '', ttl: int = None):
    """Cache a company's product list and index it by barcode"""
    ttl = ttl or PRODUCTS_LIST_CACHE_TTL
    cache.set(get_products_list_cache_key(company_id), products, ttl)

    indexed = {}
    for product in products:
        barcode = product.get('barcode')
        if barcode and barcode not in indexed:
            indexed[get_barcode_cache_key(barcode, company_id)] = product
    if indexed:
        cache.set_many(indexed, ttl)

    logger.debug(f"Cached {len(products)} products ({len(indexed)} barcodes) for company {company_id or '-'}")


def get_cached_products_list(company_id: str = ''):
    """
    Get the cached product list for a company.

    Returns:
        List of product dicts or None if not cached
    """
    return cache.get(get_products_list_cache_key(company_id))


def get_cached_product(barcode_value: str, company_id: str = ''):
    """
    Get cached product by barcode value.

    Returns:
        Product dict or None if not found
    """
    cached_data = cache.get(get_barcode_cache_key(barcode_value, company_id))
    if cached_data:
        logger.debug(f"Cache hit for barcode: {barcode_value}")
    return cached_data


def invalidate_product_cache(product: dict, company_id: str = ''):
    """
    Invalidate cache entries for a product and its company's list.

    This should be called when a product is created, updated or deleted.
    """
    cache.delete(get_products_list_cache_key(company_id))
    if product and product.get('barcode'):
        cache.delete(get_barcode_cache_key(product['barcode'], company_id))
    logger.debug(f"Invalidated catalog cache for product {product.get('id') if product else None}")


@receiver(product_changed)
def product_changed_handler(sender, product=None, company_id='', **kwargs):
    """Drop cached catalog data when a product changes on the API"""
    invalidate_product_cache(product, company_id)
