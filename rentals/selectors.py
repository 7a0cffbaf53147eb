"""Owner-scoped queries. Every caller passes the authenticated user explicitly."""

from django.db.models import Q

from .models import MaintenanceRequest, Payment, Property, Tenant, Unit
from .records import PaymentRow, TenantRow, UnitRow


def properties_for(owner):
    return Property.objects.filter(owner=owner)


def units_for(owner, property_id=None):
    units = Unit.objects.filter(property__owner=owner).select_related('property', 'tenant')
    if property_id is not None:
        units = units.filter(property_id=property_id)
    return units


def tenants_for(owner, property_id=None):
    tenants = Tenant.objects.filter(unit__property__owner=owner).select_related('unit', 'unit__property')
    if property_id is not None:
        tenants = tenants.filter(unit__property_id=property_id)
    return tenants


def payments_for(owner):
    return Payment.objects.filter(property__owner=owner).select_related('tenant', 'tenant__unit', 'property')


def maintenance_for(owner):
    return MaintenanceRequest.objects.filter(unit__property__owner=owner).select_related(
        'unit', 'unit__property', 'unit__tenant'
    )


def unit_rows(owner):
    return [UnitRow.from_model(unit) for unit in units_for(owner)]


def tenant_rows(owner, property_id=None, search=None):
    if search:
        tenants = search_tenants(owner, search, property_id=property_id)
    else:
        tenants = tenants_for(owner, property_id=property_id)
    return [TenantRow.from_model(tenant) for tenant in tenants]


def payment_rows(owner):
    return [PaymentRow.from_model(payment) for payment in payments_for(owner)]


def search_tenants(owner, query, property_id=None):
    """Tenants whose name, phone or unit number contains ``query``."""
    tenants = tenants_for(owner, property_id=property_id)
    if not query:
        return tenants
    return tenants.filter(
        Q(name__icontains=query) | Q(phone__icontains=query) | Q(unit__unit_number__icontains=query)
    )
