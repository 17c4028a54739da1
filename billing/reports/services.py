"""
Daily sales, salesman commission and day-closing figures
"""
from decimal import Decimal
from django.conf import settings
import logging

from billing.core.api_client import get_api_client
from billing.core.cache_utils import REPORTS_CACHE_TTL, cached_query
from billing.pricing.calculations import to_decimal

logger = logging.getLogger(__name__)

DAILY_SALES_PATH = '/v1/bills/daily-sales-report'
SALESMAN_COMMISSION_PATH = '/v1/bills/salesman-commission-report'
REPORT_BY_DATE_PATH = '/v1/reports/date'
GENERATE_REPORT_PATH = '/v1/reports/generate'

# Keys of paymentBreakdown in the daily sales report
BREAKDOWN_CASH = 'cash'
BREAKDOWN_UPI = 'gpay'
BREAKDOWN_CARD = 'card'
BREAKDOWN_OTHER = 'other'


def _company_id(company_id):
    return company_id if company_id is not None else settings.BILLING_COMPANY_ID


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix="daily_sales")
def get_daily_sales_report(company_id, date, client=None):
    """Total sales and payment breakdown for one day"""
    client = client or get_api_client()
    report = client.get(
        DAILY_SALES_PATH,
        params={'companyId': company_id, 'date': str(date)},
        error_message='Failed to fetch daily sales report',
    )
    return report if isinstance(report, dict) else {}


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix="salesman_commission")
def get_salesman_commission_report(company_id, date, client=None):
    """Per-salesman commission rows for one day, empty when the API sends no list"""
    client = client or get_api_client()
    report = client.get(
        SALESMAN_COMMISSION_PATH,
        params={'companyId': company_id, 'date': str(date)},
        error_message='Failed to fetch salesman commission report',
    )
    return report if isinstance(report, list) else []


def get_report_by_date(date, client=None):
    """Stored report for a day"""
    client = client or get_api_client()
    return client.get(f'{REPORT_BY_DATE_PATH}/{date}', error_message='Failed to fetch report')


def generate_report(date, client=None):
    """Ask the API to (re)build the stored report for a day"""
    client = client or get_api_client()
    report = client.post(GENERATE_REPORT_PATH, data={'date': str(date)},
                         error_message='Failed to generate report')
    logger.info(f"Generated report for {date}")
    return report


def payment_breakdown(daily_report):
    """Cash, UPI, card and other takings, 0 when missing"""
    breakdown = (daily_report or {}).get('paymentBreakdown') or {}
    return {
        'cash': to_decimal(breakdown.get(BREAKDOWN_CASH)),
        'upi': to_decimal(breakdown.get(BREAKDOWN_UPI)),
        'card': to_decimal(breakdown.get(BREAKDOWN_CARD)),
        'other': to_decimal(breakdown.get(BREAKDOWN_OTHER)),
    }


def expense_amount(expense):
    """Amount of one expense, 0 when it is missing or not a number"""
    try:
        amount = to_decimal(expense.get('amount'))
    except ValueError:
        amount = None
    if amount is None or not amount.is_finite():
        logger.warning(f"Ignoring expense {expense.get('label')!r} with invalid amount {expense.get('amount')!r}")
        return Decimal('0')
    return amount


def calculate_day_closing(daily_report, expenses=None):
    """
    Close the day's cash drawer.

    Args:
        daily_report: daily sales report dict from the API
        expenses: list of {'label': str, 'amount': number} paid out of cash

    Returns:
        dict with total sales, the payment breakdown, total expenses and
        net cash (cash takings less expenses)
    """
    breakdown = payment_breakdown(daily_report)
    total_expenses = sum(
        (expense_amount(e) for e in (expenses or [])),
        Decimal('0'),
    )
    return {
        'total_sales': to_decimal((daily_report or {}).get('totalSales')),
        **breakdown,
        'total_expenses': total_expenses,
        'net_cash': breakdown['cash'] - total_expenses,
    }


def build_daily_report(date, company_id=None, expenses=None, client=None):
    """Daily sales, commissions and day closing in one dict"""
    company_id = _company_id(company_id)
    if not company_id:
        raise ValueError('A company id is required for daily reports')

    client = client or get_api_client()
    daily = get_daily_sales_report(company_id, str(date), client=client)
    commissions = get_salesman_commission_report(company_id, str(date), client=client)
    return {
        'date': str(date),
        'company_id': company_id,
        'closing': calculate_day_closing(daily, expenses),
        'commissions': commissions,
    }
