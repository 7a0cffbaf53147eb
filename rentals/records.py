"""
Typed rows handed to the ledger and report functions.

Rows are built from ORM instances at the persistence boundary and checked
there, so the pure functions downstream never see half-joined shapes.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .exceptions import InconsistentState, InvalidAmount
from .models import Payment, Unit


@dataclass(frozen=True)
class PaymentRow:
    id: Optional[int]
    tenant_id: Optional[int]
    amount: Decimal
    method: str
    payment_date: datetime

    def __post_init__(self):
        if self.amount is None or Decimal(self.amount) <= 0:
            raise InvalidAmount(f"Payment {self.id} has a non-positive amount: {self.amount}")
        if self.method not in dict(Payment.METHOD_CHOICES):
            raise InconsistentState(f"Payment {self.id} has an unknown method: {self.method}")

    @classmethod
    def from_model(cls, payment):
        return cls(
            id=payment.pk,
            tenant_id=payment.tenant_id,
            amount=payment.amount,
            method=payment.method,
            payment_date=payment.payment_date,
        )


@dataclass(frozen=True)
class UnitRow:
    id: Optional[int]
    unit_number: str
    rent_amount: Decimal
    status: str
    property_id: Optional[int] = None

    def __post_init__(self):
        if self.rent_amount is None or Decimal(self.rent_amount) < 0:
            raise InvalidAmount(f"Unit {self.unit_number} has a negative rent: {self.rent_amount}")
        if self.status not in (Unit.VACANT, Unit.OCCUPIED):
            raise InconsistentState(f"Unit {self.unit_number} has an unknown status: {self.status}")

    @property
    def is_occupied(self):
        return self.status == Unit.OCCUPIED

    @classmethod
    def from_model(cls, unit):
        return cls(
            id=unit.pk,
            unit_number=unit.unit_number,
            rent_amount=unit.rent_amount,
            status=unit.status,
            property_id=unit.property_id,
        )


@dataclass(frozen=True)
class TenantRow:
    id: Optional[int]
    name: str
    rent_amount: Decimal
    phone: str = ''
    unit_number: str = ''
    property_name: str = ''

    def __post_init__(self):
        if self.rent_amount is None or Decimal(self.rent_amount) < 0:
            raise InvalidAmount(f"Tenant {self.name} has a negative rent: {self.rent_amount}")

    @classmethod
    def from_model(cls, tenant):
        unit = tenant.unit
        return cls(
            id=tenant.pk,
            name=tenant.name,
            phone=tenant.phone,
            rent_amount=unit.rent_amount,
            unit_number=unit.unit_number,
            property_name=unit.property.name,
        )
