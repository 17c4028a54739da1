from django.dispatch import Signal

# Sent with product=<dict> and company_id after a product is created,
# updated or deleted through the API
product_changed = Signal()
