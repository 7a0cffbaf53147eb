from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from types import SimpleNamespace

from rentals import reports
from rentals.records import PaymentRow, TenantRow, UnitRow


def pay(amount, when, tenant_id=1, method='cash'):
    return PaymentRow(id=None, tenant_id=tenant_id, amount=Decimal(amount), method=method, payment_date=when)


def unit(status, number='A1'):
    return UnitRow(id=None, unit_number=number, rent_amount=Decimal('10000'), status=status)


def test_monthly_report_groups_by_calendar_month():
    payments = [
        pay('1000', datetime(2024, 1, 15, 9, 30)),
        pay('2000', datetime(2024, 1, 20, 14, 0)),
    ]
    by_key = reports.monthly_report_by_key(payments)
    january = by_key['2024-01']
    assert january.transaction_count == 2
    assert january.total_amount == Decimal('3000.00')
    assert january.label == 'January 2024'


def test_monthly_report_is_newest_first_and_partitions_income():
    payments = [
        pay('500', datetime(2023, 12, 31, 8, 0)),
        pay('1000', datetime(2024, 2, 1, 8, 0)),
        pay('250.25', datetime(2024, 1, 5, 8, 0)),
        pay('750', datetime(2024, 2, 28, 8, 0)),
    ]
    monthly = reports.monthly_report(payments)

    assert [row.key for row in monthly] == ['2024-02', '2024-01', '2023-12']
    assert sum(row.total_amount for row in monthly) == reports.total_income(payments)
    assert sum(row.transaction_count for row in monthly) == len(payments)


def test_monthly_report_uses_local_calendar_for_aware_datetimes(settings):
    settings.TIME_ZONE = 'Africa/Nairobi'
    # 22:30 UTC on Jan 31 is Feb 1 in Nairobi (UTC+3)
    payments = [pay('100', datetime(2024, 1, 31, 22, 30, tzinfo=dt_timezone.utc))]
    assert [row.key for row in reports.monthly_report(payments)] == ['2024-02']


def test_monthly_report_is_stable_across_runs():
    payments = [pay('1000', datetime(2024, 3, 1)), pay('1000', datetime(2024, 4, 1))]
    assert reports.monthly_report(payments) == reports.monthly_report(payments)


def test_empty_payments():
    assert reports.monthly_report([]) == []
    assert reports.total_income([]) == Decimal('0')


def test_occupancy_rate():
    units = [unit('occupied', 'A1'), unit('occupied', 'A2'), unit('occupied', 'A3'), unit('vacant', 'A4')]
    assert reports.occupancy_rate(units) == Decimal('0.75')
    assert reports.occupancy_percent(units) == 75


def test_occupancy_rate_without_units_is_zero():
    assert reports.occupancy_rate([]) == 0
    assert reports.occupancy_percent([]) == 0


def test_occupancy_percent_rounds_half_up():
    units = [unit('occupied', 'A1'), unit('vacant', 'A2'), unit('vacant', 'A3')]
    assert reports.occupancy_percent(units) == 33
    units = [unit('occupied', 'A1'), unit('occupied', 'A2'), unit('vacant', 'A3')]
    assert reports.occupancy_percent(units) == 67


def test_arrears_report_and_top_debtors():
    tenants = [
        TenantRow(id=1, name='Wanjiku', rent_amount=Decimal('15000'), unit_number='A1'),
        TenantRow(id=2, name='Otieno', rent_amount=Decimal('10000'), unit_number='A2'),
        TenantRow(id=3, name='Akinyi', rent_amount=Decimal('8000'), unit_number='B1'),
        TenantRow(id=4, name='Kamau', rent_amount=Decimal('9000'), unit_number='B2'),
    ]
    when = datetime(2024, 1, 10)
    payments = [
        pay('10000', when, tenant_id=1),
        pay('12000', when, tenant_id=2),
        pay('8000', when, tenant_id=3),
        pay('400', when, tenant_id=None),
    ]

    ledgers = reports.arrears_report(tenants, payments)
    assert [entry.balance for entry in ledgers] == [
        Decimal('-5000.00'), Decimal('2000.00'), Decimal('0.00'), Decimal('-9000.00'),
    ]

    debtors = reports.top_debtors(ledgers)
    assert [entry.name for entry in debtors] == ['Kamau', 'Wanjiku']
    assert reports.top_debtors(ledgers, limit=1)[0].name == 'Kamau'
    assert reports.total_arrears(ledgers) == Decimal('14000.00')


def test_agency_commission():
    assert reports.agency_commission(Decimal('45000'), 10) == Decimal('4500.00')
    assert reports.agency_commission(Decimal('333'), 7) == Decimal('23.31')


def test_build_summary():
    tenants = [TenantRow(id=1, name='Wanjiku', rent_amount=Decimal('15000'))]
    units = [unit('occupied', 'A1'), unit('vacant', 'A2')]
    payments = [pay('5000', datetime(2024, 1, 2))]
    profile = SimpleNamespace(agency_mode=True, commission_rate=10)

    summary = reports.build_summary(1, units, tenants, payments, profile=profile)

    assert summary.unit_count == 2
    assert summary.occupied_count == 1
    assert summary.occupancy_percent == 50
    assert summary.total_income == Decimal('5000.00')
    assert summary.total_arrears == Decimal('10000.00')
    assert summary.debtor_count == 1
    assert summary.commission == Decimal('500.00')

    profile.agency_mode = False
    assert reports.build_summary(1, units, tenants, payments, profile=profile).commission is None
