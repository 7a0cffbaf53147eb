from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import pytest

from rentals.exceptions import InvalidAmount
from rentals.ledger import (
    ARREARS,
    CLEARED,
    CREDIT,
    arrears_owed,
    build_ledger,
    compute_balance,
    total_paid,
)
from rentals.records import PaymentRow, TenantRow


@dataclass
class P:
    amount: Decimal
    tenant_id: int = 1


def pay(amount, tenant_id=1):
    return PaymentRow(id=None, tenant_id=tenant_id, amount=Decimal(amount), method='cash',
                      payment_date=datetime(2024, 1, 15, 10, 0))


def test_no_payments_means_full_rent_owed():
    assert compute_balance(Decimal('15000'), []) == Decimal('-15000')
    assert compute_balance(0, []) == Decimal('0')


def test_rent_cleared_then_credit():
    payments = [P(Decimal('5000')), P(Decimal('5000'))]
    assert compute_balance(15000, payments) == Decimal('-5000')

    payments.append(P(Decimal('5000')))
    assert compute_balance(15000, payments) == Decimal('0')

    payments.append(P(Decimal('2000')))
    assert compute_balance(15000, payments) == Decimal('2000')


def test_balance_is_paid_minus_rent_and_deterministic():
    payments = [P(Decimal('1200.50')), P(Decimal('300')), P(Decimal('99.50'))]
    first = compute_balance(Decimal('2500'), payments)
    assert first == total_paid(payments) - Decimal('2500')
    assert first == Decimal('-900.00')
    assert compute_balance(Decimal('2500'), payments) == first


def test_balance_ignores_payment_order():
    payments = [P(Decimal('700')), P(Decimal('250')), P(Decimal('1000'))]
    assert compute_balance(3000, payments) == compute_balance(3000, list(reversed(payments)))


@pytest.mark.parametrize('amount', ['1', '2500', '0.01'])
def test_new_payment_raises_balance_by_its_amount(amount):
    payments = [P(Decimal('4000'))]
    before = compute_balance(10000, payments)
    after = compute_balance(10000, payments + [P(Decimal(amount))])
    assert after - before == Decimal(amount)


def test_negative_rent_is_rejected():
    with pytest.raises(InvalidAmount):
        compute_balance(Decimal('-1'), [])


def test_arrears_owed_flips_sign_for_display():
    assert arrears_owed(Decimal('-5000')) == Decimal('5000.00')
    assert arrears_owed(Decimal('0')) == Decimal('0.00')
    assert arrears_owed(Decimal('2000')) == Decimal('0.00')


def test_build_ledger_uses_only_the_tenants_payments():
    tenant = TenantRow(id=1, name='Wanjiku', rent_amount=Decimal('15000'), unit_number='A1')
    payments = [pay('5000'), pay('5000'), pay('9000', tenant_id=2)]

    entry = build_ledger(tenant, payments)

    assert entry.total_paid == Decimal('10000.00')
    assert entry.balance == Decimal('-5000.00')
    assert entry.arrears == Decimal('5000.00')
    assert entry.is_debtor
    assert entry.standing == ARREARS


def test_ledger_standing():
    tenant = TenantRow(id=1, name='Otieno', rent_amount=Decimal('1000'))
    assert build_ledger(tenant, [pay('1000')]).standing == CLEARED
    credit = build_ledger(tenant, [pay('1500')])
    assert credit.standing == CREDIT
    assert credit.credit == Decimal('500.00')
    assert not credit.is_debtor


def test_payment_rows_reject_non_positive_amounts():
    with pytest.raises(InvalidAmount):
        pay('0')
