from datetime import datetime
from decimal import Decimal
from io import BytesIO

import pytest
from openpyxl import load_workbook

from rentals import exports, reports
from rentals.records import PaymentRow, TenantRow


def test_to_csv_writes_header_and_one_line_per_row():
    payments = [
        PaymentRow(id=1, tenant_id=1, amount=Decimal('1000'), method='cash', payment_date=datetime(2024, 1, 15)),
        PaymentRow(id=2, tenant_id=1, amount=Decimal('2000'), method='bank', payment_date=datetime(2024, 1, 20)),
        PaymentRow(id=3, tenant_id=1, amount=Decimal('500'), method='card', payment_date=datetime(2024, 2, 2)),
    ]
    content = exports.to_csv(exports.monthly_report_rows(reports.monthly_report(payments)), exports.MONTHLY_COLUMNS)

    assert content.splitlines() == [
        'Month,Transactions,Amount',
        'February 2024,1,500.00',
        'January 2024,2,3000.00',
    ]


def test_debtor_csv():
    tenants = [
        TenantRow(id=1, name='Wanjiku', rent_amount=Decimal('15000'), unit_number='A1'),
        TenantRow(id=2, name='Kamau', rent_amount=Decimal('9000')),
    ]
    debtors = reports.top_debtors(reports.arrears_report(tenants, []))

    content = exports.to_csv(exports.debtor_rows(debtors), exports.DEBTOR_COLUMNS)

    assert content.splitlines() == ['Name,Unit,Arrears', 'Wanjiku,A1,15000.00', 'Kamau,N/A,9000.00']


def test_empty_csv_is_header_only():
    assert exports.to_csv([], exports.DEBTOR_COLUMNS).splitlines() == ['Name,Unit,Arrears']


@pytest.mark.django_db
def test_financial_workbook(owner, tenant):
    from rentals import selectors, services

    services.record_payment(owner, tenant.pk, 5000, 'cash')
    payment_rows = selectors.payment_rows(owner)
    ledgers = reports.arrears_report(selectors.tenant_rows(owner), payment_rows)
    summary = reports.build_summary(1, selectors.unit_rows(owner), selectors.tenant_rows(owner), payment_rows)

    content = exports.financial_workbook(
        summary=summary,
        monthly=reports.monthly_report(payment_rows),
        debtors=reports.top_debtors(ledgers),
        payments=selectors.payments_for(owner),
    )

    workbook = load_workbook(BytesIO(content))
    assert workbook.sheetnames == ['Summary', 'Monthly', 'Arrears', 'Payments']
    summary_rows = list(workbook['Summary'].iter_rows(values_only=True))
    assert summary_rows[1] == ('Total Income', 5000)
    arrears_rows = list(workbook['Arrears'].iter_rows(values_only=True))
    assert arrears_rows[1] == ('Wanjiku', 'A1', 10000)
    payment_rows = list(workbook['Payments'].iter_rows(values_only=True))
    assert payment_rows[1][1:] == ('Wanjiku', 'A1', 'Sunset', 5000, 'Cash')


@pytest.mark.django_db
def test_csv_endpoints(api_client, tenant):
    assert api_client.get('/api/reports/monthly.csv').status_code == 404

    api_client.post('/api/payments/', {'tenant': tenant.pk, 'amount': '5000', 'method': 'cash'}, format='json')

    response = api_client.get('/api/reports/monthly.csv')
    assert response.status_code == 200
    assert response['Content-Type'] == 'text/csv'
    assert response.content.decode().splitlines()[0] == 'Month,Transactions,Amount'

    response = api_client.get('/api/reports/arrears.csv')
    assert response.content.decode().splitlines() == ['Name,Unit,Arrears', 'Wanjiku,A1,10000.00']

    response = api_client.get('/api/reports/export.xlsx')
    assert response.status_code == 200
    assert response['Content-Type'] == exports.XLSX_CONTENT_TYPE
