"""
Collection and arrears reports.

Every function here folds typed rows (see ``records``) into report rows
and keeps no state between calls; the same input always gives the same
output.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.utils import timezone

from .ledger import build_ledger, to_money, total_paid


@dataclass(frozen=True)
class MonthlyTotal:
    year: int
    month: int
    transaction_count: int
    total_amount: Decimal

    @property
    def key(self):
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self):
        return date(self.year, self.month, 1).strftime('%B %Y')


@dataclass(frozen=True)
class ReportSummary:
    property_count: int
    unit_count: int
    occupied_count: int
    occupancy_rate: Decimal
    occupancy_percent: int
    total_income: Decimal
    total_arrears: Decimal
    debtor_count: int
    commission: Optional[Decimal] = None

    def as_dict(self):
        return {
            'property_count': self.property_count,
            'unit_count': self.unit_count,
            'occupied_count': self.occupied_count,
            'occupancy_rate': self.occupancy_rate,
            'occupancy_percent': self.occupancy_percent,
            'total_income': self.total_income,
            'total_arrears': self.total_arrears,
            'debtor_count': self.debtor_count,
            'commission': self.commission,
        }


def total_income(payments):
    return total_paid(payments)


def _calendar_month(moment):
    if isinstance(moment, datetime) and timezone.is_aware(moment):
        moment = timezone.localtime(moment)
    return moment.year, moment.month


def monthly_report(payments):
    """Payments grouped by calendar month of ``payment_date``, newest month first."""
    counts = defaultdict(int)
    totals = defaultdict(lambda: Decimal('0.00'))
    for payment in payments:
        month = _calendar_month(payment.payment_date)
        counts[month] += 1
        totals[month] += to_money(payment.amount)

    return [
        MonthlyTotal(year=year, month=month, transaction_count=counts[(year, month)], total_amount=totals[(year, month)])
        for year, month in sorted(counts, reverse=True)
    ]


def monthly_report_by_key(payments):
    return {row.key: row for row in monthly_report(payments)}


def arrears_report(tenants, payments):
    """One ledger entry per tenant, in the order the tenants were given."""
    by_tenant = defaultdict(list)
    for payment in payments:
        if payment.tenant_id is not None:
            by_tenant[payment.tenant_id].append(payment)
    return [build_ledger(tenant, by_tenant.get(tenant.id, [])) for tenant in tenants]


def top_debtors(ledgers, limit=None):
    debtors = sorted((entry for entry in ledgers if entry.is_debtor), key=lambda entry: entry.arrears, reverse=True)
    if limit is not None:
        debtors = debtors[:limit]
    return debtors


def total_arrears(ledgers):
    return sum((entry.arrears for entry in ledgers), Decimal('0.00'))


def occupancy_rate(units):
    """Occupied fraction over the whole unit population, vacant units included.

    Defined as 0 when there are no units.
    """
    units = list(units)
    if not units:
        return Decimal('0')
    occupied = sum(1 for unit in units if unit.is_occupied)
    return Decimal(occupied) / Decimal(len(units))


def occupancy_percent(units):
    rate = occupancy_rate(units) * 100
    return int(rate.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def agency_commission(income, commission_rate):
    """``commission_rate`` percent of ``income``."""
    rate = Decimal(str(commission_rate))
    return to_money(to_money(income) * rate / Decimal('100'))


def build_summary(property_count, units, tenants, payments, profile=None):
    units = list(units)
    ledgers = arrears_report(tenants, payments)
    income = total_income(payments)

    commission = None
    if profile is not None and profile.agency_mode:
        commission = agency_commission(income, profile.commission_rate)

    return ReportSummary(
        property_count=property_count,
        unit_count=len(units),
        occupied_count=sum(1 for unit in units if unit.is_occupied),
        occupancy_rate=occupancy_rate(units),
        occupancy_percent=occupancy_percent(units),
        total_income=income,
        total_arrears=total_arrears(ledgers),
        debtor_count=len(top_debtors(ledgers)),
        commission=commission,
    )
