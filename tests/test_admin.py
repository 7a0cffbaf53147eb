from django.contrib import admin

from rentals.models import Payment, Tenant, Unit


def test_unit_status_is_read_only_in_admin():
    assert 'status' in admin.site._registry[Unit].readonly_fields


def test_tenant_balance_is_read_only_in_admin():
    assert 'balance' in admin.site._registry[Tenant].readonly_fields


def test_payments_cannot_be_changed_in_admin():
    payment_admin = admin.site._registry[Payment]
    assert payment_admin.has_change_permission(request=None) is False
    assert payment_admin.has_delete_permission(request=None) is False
