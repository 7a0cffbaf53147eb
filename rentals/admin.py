from django.contrib import admin

from .models import MaintenanceRequest, Payment, Profile, Property, Tenant, Unit

# Register your models here
admin.site.register(Profile)
admin.site.register(Property)
admin.site.register(MaintenanceRequest)


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ['unit_number', 'property', 'rent_amount', 'status']
    list_filter = ['status']
    # Occupancy changes go through occupy/vacate so the unit and its tenant move together.
    readonly_fields = ['status']


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'unit', 'balance']
    search_fields = ['name', 'phone']
    # Cached from the payment history by Tenant.refresh_balance().
    readonly_fields = ['balance']


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['payment_date', 'tenant', 'property', 'amount', 'method']
    list_filter = ['method']

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
