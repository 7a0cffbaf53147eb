"""
Tenant ledger
=============

A tenant's balance is always derived from the payment history:

    balance = total paid - rent

Positive balances are credit (overpaid), negative balances are arrears
(owed), zero is cleared. The stored ``Tenant.balance`` column is only a
cache of this value and is never read back as the source of truth.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from .exceptions import InvalidAmount

TWO_PLACES = Decimal('0.01')

ARREARS = 'arrears'
CLEARED = 'cleared'
CREDIT = 'credit'


def to_money(amount):
    """Coerce ``amount`` (Decimal, int, float or str) to a 2-place Decimal."""
    if amount is None:
        raise InvalidAmount("Amount is required.")
    return Decimal(str(amount)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def total_paid(payments):
    total = Decimal('0.00')
    for payment in payments:
        total += to_money(payment.amount)
    return total


def compute_balance(rent_amount, payments):
    """Balance of one tenant: the sum of ``payments`` minus ``rent_amount``.

    ``payments`` must be the complete, unfiltered payment set of the tenant.
    """
    rent = to_money(rent_amount)
    if rent < 0:
        raise InvalidAmount(f"Rent cannot be negative: {rent}")
    return total_paid(payments) - rent


def arrears_owed(balance):
    """Amount owed for display, 0 when the tenant is cleared or in credit."""
    return max(Decimal('0.00'), -to_money(balance))


def standing(balance):
    if balance < 0:
        return ARREARS
    if balance > 0:
        return CREDIT
    return CLEARED


@dataclass(frozen=True)
class TenantLedger:
    tenant_id: int
    name: str
    rent: Decimal
    total_paid: Decimal
    balance: Decimal
    phone: str = ''
    unit_number: str = ''
    property_name: str = ''

    @property
    def arrears(self):
        return arrears_owed(self.balance)

    @property
    def credit(self):
        return max(Decimal('0.00'), self.balance)

    @property
    def is_debtor(self):
        return self.balance < 0

    @property
    def standing(self):
        return standing(self.balance)

    def as_dict(self):
        return {
            'tenant_id': self.tenant_id,
            'name': self.name,
            'phone': self.phone,
            'unit_number': self.unit_number,
            'property_name': self.property_name,
            'rent': self.rent,
            'total_paid': self.total_paid,
            'balance': self.balance,
            'arrears': self.arrears,
            'standing': self.standing,
        }


def build_ledger(tenant, payments):
    """Ledger entry for ``tenant`` (a TenantRow) from any payment rows.

    Payments belonging to other tenants are ignored.
    """
    own = [p for p in payments if p.tenant_id == tenant.id]
    paid = total_paid(own)
    return TenantLedger(
        tenant_id=tenant.id,
        name=tenant.name,
        phone=tenant.phone,
        unit_number=tenant.unit_number,
        property_name=tenant.property_name,
        rent=to_money(tenant.rent_amount),
        total_paid=paid,
        balance=compute_balance(tenant.rent_amount, own),
    )
