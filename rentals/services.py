"""
Write paths for properties, occupancy, payments and maintenance.

Each operation takes the acting user explicitly, validates its input
before touching the database, and runs its writes inside one
``transaction.atomic()`` block so a failure leaves nothing half-applied.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from .exceptions import (
    InconsistentState,
    InvalidAmount,
    InvalidMethod,
    InvalidTransition,
    MissingField,
    NotFound,
    ValidationFailed,
)
from .ledger import to_money
from .models import MaintenanceRequest, Payment, Profile, Property, Tenant, Unit

logger = logging.getLogger(__name__)

User = get_user_model()

# Money columns are DecimalField(max_digits=12, decimal_places=2).
MAX_AMOUNT = Decimal('10000000000')

METHOD_ALIASES = {
    'mobile-money': Payment.MPESA,
    'mobile money': Payment.MPESA,
    'mobile_money': Payment.MPESA,
    'm-pesa': Payment.MPESA,
}


def normalize_method(method):
    """Map a method value or its display label ("M-Pesa", "Bank Transfer") to the stored value."""
    if not method:
        raise MissingField("Payment method is required.")
    key = str(method).strip().lower()
    for value, label in Payment.METHOD_CHOICES:
        if key in (value, label.lower()):
            return value
    if key in METHOD_ALIASES:
        return METHOD_ALIASES[key]
    raise InvalidMethod(f"Unknown payment method: {method}")


def _positive_amount(amount, field='amount'):
    if amount is None or amount == '':
        raise MissingField(f"{field} is required.")
    try:
        value = to_money(amount)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(f"{field} must be a number, got {amount!r}.")
    if not value.is_finite():
        raise InvalidAmount(f"{field} must be a number, got {amount!r}.")
    if value >= MAX_AMOUNT:
        raise InvalidAmount(f"{field} must be less than {MAX_AMOUNT}.")
    if value <= 0:
        raise InvalidAmount(f"{field} must be greater than zero.")
    return value


def _required(value, field):
    if value is None or not str(value).strip():
        raise MissingField(f"{field} is required.")
    return str(value).strip()


def _get_owned(queryset, pk, label):
    if pk is None:
        raise MissingField(f"{label} id is required.")
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{label} not found or does not belong to you.")


def _owned_units(owner):
    return Unit.objects.filter(property__owner=owner).select_related('property')


def _owned_tenants(owner):
    return Tenant.objects.filter(unit__property__owner=owner).select_related('unit', 'unit__property')


# Accounts


def register_user(username, email, password, full_name=''):
    """Create a user and their profile together."""
    username = _required(username, 'username')
    _required(password, 'password')
    if User.objects.filter(username=username).exists():
        raise ValidationFailed("Username already taken")

    with transaction.atomic():
        user = User.objects.create_user(username=username, email=email or '', password=password)
        Profile.objects.create(
            user=user,
            full_name=full_name or '',
            commission_rate=settings.KEJA_DEFAULT_COMMISSION_RATE,
        )

    logger.info("Registered user %s", username)
    return user


def get_profile(user):
    profile, _ = Profile.objects.get_or_create(
        user=user, defaults={'commission_rate': settings.KEJA_DEFAULT_COMMISSION_RATE}
    )
    return profile


def update_profile(user, full_name=None, phone=None, commission_rate=None, agency_mode=None):
    profile = get_profile(user)

    if commission_rate is not None:
        try:
            commission_rate = int(commission_rate)
        except (TypeError, ValueError):
            raise InvalidAmount("commission_rate must be a whole number.")
        if not 0 <= commission_rate <= 100:
            raise InvalidAmount("commission_rate must be between 0 and 100.")
        profile.commission_rate = commission_rate
    if full_name is not None:
        profile.full_name = full_name
    if phone is not None:
        profile.phone = phone
    if agency_mode is not None:
        profile.agency_mode = bool(agency_mode)

    profile.save()
    return profile


# Properties and units


def _clean_draft_units(units):
    if not units:
        raise MissingField("Add at least one unit.")

    cleaned = []
    seen = set()
    for index, draft in enumerate(units, start=1):
        unit_number = _required(draft.get('unit_number'), f"unit {index}: unit_number")
        if unit_number in seen:
            raise ValidationFailed(f"Unit number {unit_number} appears more than once.")
        seen.add(unit_number)

        rent = _positive_amount(draft.get('rent_amount'), f"unit {unit_number}: rent_amount")
        status = draft.get('status') or Unit.VACANT
        if status not in (Unit.VACANT, Unit.OCCUPIED):
            raise ValidationFailed(f"Unit {unit_number}: unknown status {status!r}.")

        tenant = None
        if status == Unit.OCCUPIED:
            tenant = {
                'name': _required(draft.get('tenant_name'), f"unit {unit_number}: tenant_name"),
                'phone': _required(draft.get('tenant_phone'), f"unit {unit_number}: tenant_phone"),
            }
        cleaned.append((unit_number, rent, tenant))
    return cleaned


def create_property(owner, name, location='', units=()):
    """Create a property with its units; occupied drafts get their tenant in the same transaction."""
    name = _required(name, 'name')
    drafts = _clean_draft_units(units)

    with transaction.atomic():
        prop = Property.objects.create(owner=owner, name=name, location=location or '')
        for unit_number, rent, tenant in drafts:
            unit = Unit.objects.create(
                property=prop,
                unit_number=unit_number,
                rent_amount=rent,
                status=Unit.OCCUPIED if tenant else Unit.VACANT,
            )
            if tenant:
                Tenant.objects.create(unit=unit, **tenant).refresh_balance()

    logger.info("Property %s created with %d units", prop.pk, len(drafts))
    return prop


def update_property(owner, property_id, name=None, location=None):
    prop = _get_owned(Property.objects.filter(owner=owner), property_id, 'Property')
    if name is not None:
        prop.name = _required(name, 'name')
    if location is not None:
        prop.location = location
    prop.save()
    return prop


def add_unit(owner, property_id, unit_number, rent_amount):
    prop = _get_owned(Property.objects.filter(owner=owner), property_id, 'Property')
    unit_number = _required(unit_number, 'unit_number')
    rent = _positive_amount(rent_amount, 'rent_amount')
    if prop.units.filter(unit_number=unit_number).exists():
        raise InconsistentState(f"Unit {unit_number} already exists in {prop.name}.")
    return Unit.objects.create(property=prop, unit_number=unit_number, rent_amount=rent)


def update_unit_rent(owner, unit_id, rent_amount):
    """Change the rent and re-derive the cached balance of the unit's tenant."""
    rent = _positive_amount(rent_amount, 'rent_amount')
    with transaction.atomic():
        unit = _get_owned(_owned_units(owner).select_for_update(), unit_id, 'Unit')
        unit.rent_amount = rent
        unit.save(update_fields=['rent_amount'])
        tenant = Tenant.objects.filter(unit=unit).first()
        if tenant is not None:
            tenant.unit = unit
            tenant.refresh_balance()
    return unit


def delete_unit(owner, unit_id):
    unit = _get_owned(_owned_units(owner), unit_id, 'Unit')
    with transaction.atomic():
        unit.delete()
    logger.info("Unit %s deleted", unit_id)


# Occupancy


def occupy_unit(owner, unit_id, name, phone):
    """Assign a new tenant to a vacant unit: vacant -> occupied."""
    name = _required(name, 'name')
    phone = _required(phone, 'phone')

    with transaction.atomic():
        unit = _get_owned(_owned_units(owner).select_for_update(), unit_id, 'Unit')
        if unit.status == Unit.OCCUPIED or Tenant.objects.filter(unit=unit).exists():
            raise InconsistentState(f"Unit {unit.unit_number} is already occupied.")

        tenant = Tenant.objects.create(unit=unit, name=name, phone=phone)
        unit.status = Unit.OCCUPIED
        unit.save(update_fields=['status'])
        tenant.refresh_balance()

    logger.info("Unit %s occupied by tenant %s", unit.pk, tenant.pk)
    return tenant


def update_tenant(owner, tenant_id, name=None, phone=None):
    tenant = _get_owned(_owned_tenants(owner), tenant_id, 'Tenant')
    if name is not None:
        tenant.name = _required(name, 'name')
    if phone is not None:
        tenant.phone = _required(phone, 'phone')
    tenant.save(update_fields=['name', 'phone'])
    return tenant


def vacate_unit(owner, unit_id):
    """Remove the unit's tenant and mark it vacant: occupied -> vacant.

    Recorded payments stay in the owner's history with their tenant cleared.
    """
    with transaction.atomic():
        unit = _get_owned(_owned_units(owner).select_for_update(), unit_id, 'Unit')
        tenant = Tenant.objects.filter(unit=unit).first()
        if tenant is None:
            raise InconsistentState(f"Unit {unit.unit_number} has no tenant to vacate.")

        tenant_id = tenant.pk
        tenant.delete()
        unit.status = Unit.VACANT
        unit.save(update_fields=['status'])

    logger.info("Unit %s vacated (tenant %s removed)", unit.pk, tenant_id)
    return unit


# Payments


def record_payment(owner, tenant_id, amount, method, payment_date=None):
    """Append a payment for ``tenant_id`` and re-derive the tenant's cached balance.

    The insert and the balance recomputation share one transaction.
    """
    amount = _positive_amount(amount)
    method = normalize_method(method)
    if payment_date is None:
        payment_date = timezone.now()
    elif not isinstance(payment_date, datetime):
        raise MissingField("payment_date must be a datetime.")
    elif settings.USE_TZ and timezone.is_naive(payment_date):
        payment_date = timezone.make_aware(payment_date)

    with transaction.atomic():
        tenant = _get_owned(_owned_tenants(owner).select_for_update(), tenant_id, 'Tenant')
        payment = Payment.objects.create(
            property=tenant.unit.property,
            tenant=tenant,
            amount=amount,
            method=method,
            payment_date=payment_date,
        )
        balance = tenant.refresh_balance()

    logger.info("Payment %s of %s recorded for tenant %s (balance %s)", payment.pk, amount, tenant.pk, balance)
    return payment


# Maintenance


def open_maintenance_request(owner, unit_id, description):
    description = _required(description, 'description')
    unit = _get_owned(_owned_units(owner), unit_id, 'Unit')
    request = MaintenanceRequest.objects.create(unit=unit, description=description)
    logger.info("Maintenance request %s opened for unit %s", request.pk, unit.pk)
    return request


def advance_maintenance_request(owner, request_id, status):
    if status not in dict(MaintenanceRequest.STATUS_CHOICES):
        raise InvalidTransition(f"Unknown maintenance status: {status!r}")

    with transaction.atomic():
        request = _get_owned(
            MaintenanceRequest.objects.filter(unit__property__owner=owner).select_for_update(),
            request_id,
            'Maintenance request',
        )
        request.advance(status)
    return request