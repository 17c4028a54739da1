"""Exceptions raised by the billing services"""


class BillingError(Exception):
    """Base class for all billing errors"""
    default_message = 'Billing operation failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ApiError(BillingError):
    """The billing API answered with an error or could not be reached"""
    default_message = 'Request to billing API failed'

    def __init__(self, message=None, status_code=None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class ProductNotFound(BillingError):
    """No catalog product matches a scanned barcode"""

    def __init__(self, barcode):
        self.barcode = barcode
        super().__init__(f'Product not found for barcode: {barcode}')


class ItemNotAvailable(BillingError):
    """Scanned product has no stock left"""
    default_message = 'Item not available'


class BillValidationError(BillingError):
    """Bill is not ready to be saved"""
    default_message = 'Please add items and select salesman before saving.'
