from django.apps import AppConfig


class CatalogConfig(AppConfig):
    name = 'billing.catalog'

    def ready(self):
        """Import signals when app is ready"""
        import billing.catalog.barcode_cache  # noqa: F401
