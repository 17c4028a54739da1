"""
Comprehensive test suite for Reports module
Tests: Daily sales, Salesman commission, Payment breakdown, Day closing, Daily report command
"""
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings

from billing.core.test_utils import FakeApiClient
from billing.reports.services import (
    DAILY_SALES_PATH, GENERATE_REPORT_PATH, REPORT_BY_DATE_PATH,
    SALESMAN_COMMISSION_PATH, build_daily_report, calculate_day_closing, get_daily_sales_report,
    get_report_by_date, get_salesman_commission_report, payment_breakdown,
)

DAILY_SALES = {
    'totalSales': 15000,
    'paymentBreakdown': {'cash': 9000, 'gpay': 4500, 'card': 1500},
}

COMMISSIONS = [{
    'salesman': {'name': 'Ravi', 'commissionRate': 5},
    'totalCommission1': 300,
    'totalCommission2': 150,
    'totalCommission': 450,
}]


def make_client():
    return FakeApiClient({
        ('GET', DAILY_SALES_PATH): DAILY_SALES,
        ('GET', SALESMAN_COMMISSION_PATH): COMMISSIONS,
        ('POST', GENERATE_REPORT_PATH): {'date': '2024-03-01'},
    })


class DayClosingTests(SimpleTestCase):
    """Test payment breakdown and cash closing"""

    def test_payment_breakdown(self):
        """Test gpay takings are reported as UPI"""
        breakdown = payment_breakdown(DAILY_SALES)
        self.assertEqual(breakdown['cash'], Decimal('9000'))
        self.assertEqual(breakdown['upi'], Decimal('4500'))
        self.assertEqual(breakdown['card'], Decimal('1500'))
        self.assertEqual(breakdown['other'], Decimal('0'))

    def test_payment_breakdown_missing(self):
        """Test missing breakdown reads as zeros"""
        self.assertEqual(payment_breakdown({})['cash'], Decimal('0'))
        self.assertEqual(payment_breakdown(None)['upi'], Decimal('0'))

    def test_net_cash(self):
        """Test expenses come out of cash takings"""
        closing = calculate_day_closing(DAILY_SALES, [
            {'label': 'Tea', 'amount': 120},
            {'label': 'Courier', 'amount': '380'},
        ])
        self.assertEqual(closing['total_sales'], Decimal('15000'))
        self.assertEqual(closing['total_expenses'], Decimal('500'))
        self.assertEqual(closing['net_cash'], Decimal('8500'))

    def test_no_expenses(self):
        closing = calculate_day_closing(DAILY_SALES)
        self.assertEqual(closing['net_cash'], Decimal('9000'))

    def test_invalid_expense_amount_counts_as_zero(self):
        """Test expenses that are not numbers add nothing"""
        closing = calculate_day_closing(DAILY_SALES, [
            {'label': 'Tea', 'amount': 'lots'},
            {'label': 'Snacks', 'amount': 'NaN'},
            {'label': 'Courier'},
            {'label': 'Auto', 'amount': '50'},
        ])
        self.assertEqual(closing['total_expenses'], Decimal('50'))
        self.assertEqual(closing['net_cash'], Decimal('8950'))


class ReportServiceTests(SimpleTestCase):
    """Test fetching and caching reports"""

    def setUp(self):
        cache.clear()
        self.client = make_client()

    def test_daily_sales_report_cached(self):
        """Test the daily report is fetched once per company and date"""
        report = get_daily_sales_report('company-1', '2024-03-01', client=self.client)
        get_daily_sales_report('company-1', '2024-03-01', client=self.client)

        self.assertEqual(report, DAILY_SALES)
        self.assertEqual(len(self.client.calls_to('GET', DAILY_SALES_PATH)), 1)
        self.assertEqual(self.client.calls[0]['params'], {'companyId': 'company-1', 'date': '2024-03-01'})

    def test_daily_sales_report_per_date(self):
        get_daily_sales_report('company-1', '2024-03-01', client=self.client)
        get_daily_sales_report('company-1', '2024-03-02', client=self.client)
        self.assertEqual(len(self.client.calls_to('GET', DAILY_SALES_PATH)), 2)

    def test_commission_report_non_list(self):
        """Test a non-list commission response reads as no rows"""
        client = FakeApiClient({('GET', SALESMAN_COMMISSION_PATH): {'message': 'none'}})
        self.assertEqual(get_salesman_commission_report('company-1', '2024-03-01', client=client), [])

    def test_report_by_date(self):
        """Test the stored report is fetched by date in the path"""
        client = FakeApiClient({('GET', f'{REPORT_BY_DATE_PATH}/2024-03-01'): {'date': '2024-03-01', 'totalSales': 15000}})
        report = get_report_by_date('2024-03-01', client=client)
        self.assertEqual(report['totalSales'], 15000)
        self.assertEqual(client.calls[0]['params'], None)

    def test_build_daily_report(self):
        report = build_daily_report('2024-03-01', company_id='company-1',
                                    expenses=[{'label': 'Tea', 'amount': 100}], client=self.client)
        self.assertEqual(report['closing']['net_cash'], Decimal('8900'))
        self.assertEqual(report['commissions'], COMMISSIONS)

    @override_settings(BILLING_COMPANY_ID='')
    def test_build_daily_report_requires_company(self):
        with self.assertRaises(ValueError):
            build_daily_report('2024-03-01', client=self.client)


@override_settings(BILLING_COMPANY_ID='company-1')
class DailyReportCommandTests(SimpleTestCase):
    """Test the daily_report management command"""

    def setUp(self):
        cache.clear()
        self.client = make_client()
        patcher = mock.patch('billing.reports.services.get_api_client', return_value=self.client)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_daily_report(self):
        """Test report output with expenses"""
        out = StringIO()
        call_command('daily_report', '--date', '2024-03-01', '--expense', 'Tea:120', stdout=out)
        output = out.getvalue()
        self.assertIn('DAILY REPORT 2024-03-01', output)
        self.assertIn('Net Cash:       8880', output)
        self.assertIn('Ravi', output)

    def test_daily_report_generate(self):
        call_command('daily_report', '--date', '2024-03-01', '--generate', stdout=StringIO())
        self.assertEqual(len(self.client.calls_to('POST', GENERATE_REPORT_PATH)), 1)

    def test_invalid_expense(self):
        with self.assertRaises(CommandError):
            call_command('daily_report', '--expense', 'Tea', stdout=StringIO())
