"""
HTTP client for the centralized billing API.

Every call goes through one requests.Session carrying the bearer token.
Idempotent GET calls are retried with backoff on connection errors and
gateway failures; everything else fails on the first error.
"""
import json
import logging

import requests
from django.conf import settings
from requests.adapters import HTTPAdapter
from rest_framework.utils.encoders import JSONEncoder
from urllib3.util.retry import Retry

from .exceptions import ApiError

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES = (502, 503, 504)
RETRY_BACKOFF_FACTOR = 0.5


def extract_error_message(response, default):
    """Pull a human readable message out of an error response body"""
    try:
        data = response.json()
    except ValueError:
        return default

    if isinstance(data, dict):
        message = data.get('message')
        if isinstance(message, list):
            message = ', '.join(str(m) for m in message)
        if message:
            return str(message)
    elif isinstance(data, str) and data.strip():
        return data
    return default


class ApiClient:
    """Thin wrapper around requests.Session for the /v1 endpoints"""

    def __init__(self, base_url=None, token=None, timeout=None, max_retries=None,
                 session=None, authenticated=True):
        self.base_url = (base_url or settings.BILLING_API_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else settings.BILLING_API_TIMEOUT
        if max_retries is None:
            max_retries = settings.BILLING_API_MAX_RETRIES

        self.session = session or requests.Session()
        retry = Retry(
            total=max_retries,
            backoff_factor=RETRY_BACKOFF_FACTOR,
            status_forcelist=RETRY_STATUS_CODES,
            allowed_methods=frozenset(['GET']),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount('http://', adapter)
        self.session.mount('https://', adapter)
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

        if authenticated:
            token = token if token is not None else settings.BILLING_API_TOKEN
            if token:
                self.session.headers['Authorization'] = f'Bearer {token}'

    def request(self, method, path, params=None, data=None, error_message=None):
        """Send a request and return the decoded JSON body (None when empty)"""
        url = f'{self.base_url}{path}'
        error_message = error_message or ApiError.default_message
        body = json.dumps(data, cls=JSONEncoder) if data is not None else None

        try:
            response = self.session.request(
                method, url, params=params, data=body, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f'{method} {url} failed: {e}')
            raise ApiError(f'{error_message}: {e}') from e

        if not response.ok:
            message = extract_error_message(response, error_message)
            logger.warning(f'{method} {url} returned {response.status_code}: {message}')
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise ApiError(message, status_code=response.status_code, payload=payload)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, path, params=None, error_message=None):
        return self.request('GET', path, params=params, error_message=error_message)

    def post(self, path, data=None, error_message=None):
        return self.request('POST', path, data=data, error_message=error_message)

    def put(self, path, data=None, error_message=None):
        return self.request('PUT', path, data=data, error_message=error_message)

    def delete(self, path, error_message=None):
        return self.request('DELETE', path, error_message=error_message)


def get_api_client():
    """Client authenticated with the configured bearer token"""
    return ApiClient()


def get_public_client():
    """Client for endpoints that need no token (company list)"""
    return ApiClient(authenticated=False)


def list_companies(client=None):
    """List the companies registered on the billing API"""
    client = client or get_public_client()
    companies = client.get('/v1/companies', error_message='Failed to fetch companies')
    return companies if isinstance(companies, list) else []
