"""
Django management command to ring up a bill at the cashier desk

Barcodes come from --barcode options or, when none are given, one per line
on stdin. Unknown or out-of-stock barcodes are reported and skipped.
"""
import sys

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from rest_framework import serializers

from billing.core.exceptions import ApiError, BillingError, BillValidationError
from billing.pos.cart import PAYMENT_CASH, PAYMENT_MODE_MULTIPLE, PAYMENT_METHODS
from billing.pos.services import build_bill_document, new_cart, save_bill
from billing.pricing.calculations import DISCOUNT_PERCENTAGE, DISCOUNT_TYPES


def parse_payment(value):
    """'UPI:700' -> ('UPI', '700')"""
    method, sep, amount = value.partition(':')
    if not sep or method not in PAYMENT_METHODS:
        raise CommandError(
            f"Invalid payment '{value}', expected METHOD:AMOUNT with METHOD in {', '.join(PAYMENT_METHODS)}"
        )
    return method, amount


class Command(BaseCommand):
    help = 'Scan barcodes into a bill, apply discount and payments, and save it'

    def add_arguments(self, parser):
        parser.add_argument('--salesman', required=True, help='Salesman name')
        parser.add_argument('--customer', default='', help='Customer name (default: Walk-in Customer)')
        parser.add_argument(
            '--barcode',
            action='append',
            default=[],
            help='Barcode to scan; repeat for more items',
        )
        parser.add_argument('--discount', default='0', help='Discount value')
        parser.add_argument(
            '--discount-type',
            choices=DISCOUNT_TYPES,
            default=DISCOUNT_PERCENTAGE,
            help='percentage of the grand total or a custom rupee amount',
        )
        parser.add_argument(
            '--payment-method',
            choices=PAYMENT_METHODS,
            default=PAYMENT_CASH,
            help='Method of a single payment covering the bill',
        )
        parser.add_argument(
            '--payment',
            action='append',
            default=[],
            help='Split payment as METHOD:AMOUNT; repeat for each part',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show the bill without saving it',
        )

    def handle(self, *args, **options):
        try:
            cart = new_cart()
        except ApiError as e:
            raise CommandError(e.message)

        try:
            cart.select_salesman(options['salesman'])
            cart.customer_name = options.get('customer') or ''
            cart.set_discount(options['discount_type'], options['discount'])
        except ValueError as e:
            raise CommandError(str(e))

        barcodes = options.get('barcode') or []
        if not barcodes:
            barcodes = sys.stdin.read().splitlines()

        for code in barcodes:
            try:
                line = cart.scan(code)
            except BillingError as e:
                self.stderr.write(self.style.ERROR(e.message))
                continue
            if line is not None:
                self.stdout.write(f"+ {line.name} [{line.scanned_barcode}] x{line.quantity} = {line.total}")

        self._apply_payments(cart, options)
        self._print_summary(cart)

        if options.get('dry_run'):
            try:
                build_bill_document(cart)
            except BillValidationError as e:
                raise CommandError(e.message)
            self.stdout.write(self.style.WARNING('Dry run, bill not saved'))
            return

        try:
            saved = save_bill(cart)
        except BillValidationError as e:
            raise CommandError(e.message)
        except serializers.ValidationError as e:
            raise CommandError(f"Invalid bill: {e.detail}")
        except ApiError as e:
            raise CommandError(e.message)

        bill_no = saved.get('billNo') if isinstance(saved, dict) else None
        self.stdout.write(self.style.SUCCESS(f"Saved bill {bill_no}" if bill_no else "Bill saved"))

    def _apply_payments(self, cart, options):
        payments = [parse_payment(p) for p in options.get('payment') or []]
        try:
            cart.set_payment_method(0, options['payment_method'])
            if not payments:
                return
            cart.set_payment_mode(PAYMENT_MODE_MULTIPLE)
            first_method, first_amount = payments[0]
            cart.set_payment_method(0, first_method)
            cart.set_payment_amount(0, first_amount)
            for method, amount in payments[1:]:
                cart.add_payment(method, amount)
        except ValueError as e:
            raise CommandError(str(e))

    def _print_summary(self, cart):
        self.stdout.write("")
        self.stdout.write(f"{settings.BILLING_COMPANY_NAME}  GSTIN: {settings.BILLING_COMPANY_GST_NO}")
        self.stdout.write(f"{'Product':<30} {'Barcode':<12} {'Price':>8} {'Qty':>4} {'CGST':>6} {'SGST':>6} {'Total':>9}")
        self.stdout.write("-" * 81)
        for line in cart.lines:
            taxes = line.taxes
            self.stdout.write(
                f"{line.name[:30]:<30} {line.scanned_barcode:<12} {str(line.base_price):>8} "
                f"{line.quantity:>4} {str(taxes['cgst']):>6} {str(taxes['sgst']):>6} {str(line.total):>9}"
            )
        self.stdout.write("-" * 81)

        taxes = cart.taxes
        self.stdout.write(f"CGST: {taxes['total_cgst']}  SGST: {taxes['total_sgst']}")
        if cart.discount > 0:
            self.stdout.write(f"Discount: -{cart.discount}")
        self.stdout.write(self.style.SUCCESS(f"Grand Total: {cart.final_total}"))
        for payment in cart.payments:
            self.stdout.write(f"  {payment['method']}: {payment['amount']}")
        if cart.payment_error:
            self.stdout.write(self.style.ERROR(
                f"Total paid {cart.total_paid} must match the grand total {cart.final_total}"
            ))
