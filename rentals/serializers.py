from decimal import Decimal

from rest_framework import serializers

from .models import MaintenanceRequest, Payment, Profile, Property, Tenant, Unit


class ProfileSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'username', 'email', 'full_name', 'phone', 'commission_rate', 'agency_mode']
        read_only_fields = ['id', 'username', 'email']


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, min_length=6)
    confirm_password = serializers.CharField(write_only=True)
    full_name = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs):
        if attrs['password'] != attrs['confirm_password']:
            raise serializers.ValidationError({'confirm_password': "Passwords do not match."})
        return attrs


class TenantBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tenant
        fields = ['id', 'name', 'phone']


class UnitSerializer(serializers.ModelSerializer):
    property_name = serializers.CharField(source='property.name', read_only=True)
    tenant = serializers.SerializerMethodField()

    class Meta:
        model = Unit
        fields = ['id', 'property', 'property_name', 'unit_number', 'rent_amount', 'status', 'tenant']
        read_only_fields = ['id', 'property', 'property_name', 'status', 'tenant']

    def get_tenant(self, unit):
        tenant = unit.current_tenant()
        return TenantBriefSerializer(tenant).data if tenant else None


class DraftUnitSerializer(serializers.Serializer):
    unit_number = serializers.CharField(max_length=50)
    rent_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = serializers.ChoiceField(choices=Unit.STATUS_CHOICES, default=Unit.VACANT)
    tenant_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    tenant_phone = serializers.CharField(required=False, allow_blank=True, max_length=32)


class AddUnitSerializer(serializers.Serializer):
    unit_number = serializers.CharField(max_length=50)
    rent_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))


class UnitRentSerializer(serializers.Serializer):
    rent_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))


class PropertySerializer(serializers.ModelSerializer):
    units = UnitSerializer(many=True, read_only=True)

    class Meta:
        model = Property
        fields = ['id', 'name', 'location', 'created_at', 'units']
        read_only_fields = ['id', 'created_at', 'units']


class CreatePropertySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    location = serializers.CharField(required=False, allow_blank=True, max_length=255)
    units = DraftUnitSerializer(many=True)


class OccupySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=32)


class TenantSerializer(serializers.ModelSerializer):
    unit_number = serializers.CharField(source='unit.unit_number', read_only=True)
    property_name = serializers.CharField(source='unit.property.name', read_only=True)

    class Meta:
        model = Tenant
        fields = ['id', 'name', 'phone', 'unit', 'unit_number', 'property_name', 'created_at']
        read_only_fields = ['id', 'unit', 'unit_number', 'property_name', 'created_at']


class LedgerEntrySerializer(serializers.Serializer):
    tenant_id = serializers.IntegerField()
    name = serializers.CharField()
    phone = serializers.CharField()
    unit_number = serializers.CharField()
    property_name = serializers.CharField()
    rent = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    arrears = serializers.DecimalField(max_digits=14, decimal_places=2)
    standing = serializers.CharField()


class PaymentSerializer(serializers.ModelSerializer):
    tenant_name = serializers.CharField(source='tenant.name', read_only=True, default=None)
    unit_number = serializers.CharField(source='tenant.unit.unit_number', read_only=True, default=None)
    property_name = serializers.CharField(source='property.name', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'tenant', 'tenant_name', 'unit_number', 'property', 'property_name',
            'amount', 'method', 'payment_date', 'created_at',
        ]
        read_only_fields = fields


class RecordPaymentSerializer(serializers.Serializer):
    tenant = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.CharField(max_length=32)
    payment_date = serializers.DateTimeField(required=False)


class MaintenanceRequestSerializer(serializers.ModelSerializer):
    unit_number = serializers.CharField(source='unit.unit_number', read_only=True)
    property_name = serializers.CharField(source='unit.property.name', read_only=True)

    class Meta:
        model = MaintenanceRequest
        fields = ['id', 'unit', 'unit_number', 'property_name', 'description', 'status', 'created_at']
        read_only_fields = ['id', 'unit', 'unit_number', 'property_name', 'status', 'created_at']


class MonthlyTotalSerializer(serializers.Serializer):
    key = serializers.CharField()
    label = serializers.CharField()
    transaction_count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
