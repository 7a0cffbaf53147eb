from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .exceptions import ImmutablePayment, InvalidTransition
from .ledger import compute_balance


class Profile(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='profile')
    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    commission_rate = models.PositiveSmallIntegerField(default=10, validators=[MaxValueValidator(100)])
    agency_mode = models.BooleanField(default=False)

    def __str__(self):
        return self.full_name or self.user.get_username()


class Property(models.Model):
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='properties')
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = 'properties'
        ordering = ['name']

    def __str__(self):
        return self.name


class Unit(models.Model):
    VACANT = 'vacant'
    OCCUPIED = 'occupied'
    STATUS_CHOICES = [
        (VACANT, 'Vacant'),
        (OCCUPIED, 'Occupied'),
    ]

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name='units')
    unit_number = models.CharField(max_length=50)
    rent_amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=VACANT)

    class Meta:
        ordering = ['unit_number']
        constraints = [
            models.UniqueConstraint(fields=['property', 'unit_number'], name='unique_unit_number_per_property'),
        ]

    def __str__(self):
        return f"{self.unit_number} ({self.property.name})"

    def current_tenant(self):
        """The unit's tenant, or None when vacant."""
        try:
            return self.tenant
        except Tenant.DoesNotExist:
            return None


class Tenant(models.Model):
    unit = models.OneToOneField(Unit, on_delete=models.CASCADE, related_name='tenant')
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32)
    # Cache of the derived ledger balance (paid - rent). Rewritten by refresh_balance().
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.unit.unit_number})"

    def refresh_balance(self):
        payments = list(Payment.objects.filter(tenant_id=self.pk))
        self.balance = compute_balance(self.unit.rent_amount, payments)
        self.save(update_fields=['balance'])
        return self.balance


class Payment(models.Model):
    CASH = 'cash'
    MPESA = 'mpesa'
    BANK = 'bank'
    CARD = 'card'
    METHOD_CHOICES = [
        (CASH, 'Cash'),
        (MPESA, 'M-Pesa'),
        (BANK, 'Bank Transfer'),
        (CARD, 'Card'),
    ]

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name='payments')
    tenant = models.ForeignKey(Tenant, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    method = models.CharField(max_length=10, choices=METHOD_CHOICES, default=CASH)
    payment_date = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-payment_date']

    def __str__(self):
        return f"{self.amount} via {self.get_method_display()} ({self.payment_date:%Y-%m-%d})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutablePayment("Payments cannot be modified once recorded.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutablePayment("Payments cannot be deleted once recorded.")


class MaintenanceRequest(models.Model):
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (IN_PROGRESS, 'In Progress'),
        (COMPLETED, 'Completed'),
    ]
    NEXT_STATUS = {
        PENDING: IN_PROGRESS,
        IN_PROGRESS: COMPLETED,
    }

    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name='maintenance_requests')
    description = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.unit} - {self.get_status_display()}"

    def advance(self, new_status):
        if self.NEXT_STATUS.get(self.status) != new_status:
            raise InvalidTransition(
                f"Cannot move a maintenance request from '{self.status}' to '{new_status}'."
            )
        self.status = new_status
        self.save(update_fields=['status'])
