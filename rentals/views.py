# views.py
import logging

from django.contrib.auth import authenticate
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.authentication import TokenAuthentication
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from . import exports, reports, selectors, services
from .exceptions import LedgerError
from .serializers import (
    AddUnitSerializer,
    CreatePropertySerializer,
    LedgerEntrySerializer,
    MaintenanceRequestSerializer,
    MonthlyTotalSerializer,
    OccupySerializer,
    PaymentSerializer,
    ProfileSerializer,
    PropertySerializer,
    RecordPaymentSerializer,
    RegisterSerializer,
    TenantSerializer,
    UnitRentSerializer,
    UnitSerializer,
)

logger = logging.getLogger(__name__)


def _error(exc):
    logger.warning("Rejected: %s", exc.detail)
    return Response({"detail": exc.detail}, status=exc.status_code)


def _int_param(request, name):
    value = request.query_params.get(name)
    if value in (None, '', 'ALL'):
        return None
    try:
        return int(value)
    except ValueError:
        raise LedgerError(f"{name} must be an integer.")


def _ledgers(owner, property_id=None, search=None):
    tenants = selectors.tenant_rows(owner, property_id=property_id, search=search)
    return reports.arrears_report(tenants, selectors.payment_rows(owner))


def _summary(user):
    return reports.build_summary(
        property_count=selectors.properties_for(user).count(),
        units=selectors.unit_rows(user),
        tenants=selectors.tenant_rows(user),
        payments=selectors.payment_rows(user),
        profile=services.get_profile(user),
    )


@api_view(['POST'])
@permission_classes([AllowAny])
def register_user(request):
    """
    Register a new landlord account and its profile.
    """
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        services.register_user(
            username=data['username'],
            email=data.get('email', ''),
            password=data['password'],
            full_name=data.get('full_name', ''),
        )
    except LedgerError as exc:
        return _error(exc)
    return Response({"message": "User registered successfully"}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_user(request):
    """
    Expected JSON:
    {
        "username": "landlord1",
        "password": "securepass123"
    }
    """
    username = request.data.get('username')
    password = request.data.get('password')
    user = authenticate(username=username, password=password)

    if user:
        token, created = Token.objects.get_or_create(user=user)
        profile = services.get_profile(user)
        return Response({
            "token": token.key,
            "username": user.username,
            "email": user.email,
            "full_name": profile.full_name,
            "agency_mode": profile.agency_mode,
        })
    return Response({"error": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)


@api_view(['GET', 'PATCH'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def profile_detail(request):
    if request.method == 'GET':
        return Response(ProfileSerializer(services.get_profile(request.user)).data)

    serializer = ProfileSerializer(services.get_profile(request.user), data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        profile = services.update_profile(request.user, **serializer.validated_data)
    except LedgerError as exc:
        return _error(exc)
    return Response(ProfileSerializer(profile).data)


@api_view(['GET', 'POST'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def property_list(request):
    if request.method == 'GET':
        props = selectors.properties_for(request.user).prefetch_related('units__tenant')
        return Response(PropertySerializer(props, many=True).data)

    serializer = CreatePropertySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        prop = services.create_property(
            request.user, name=data['name'], location=data.get('location', ''), units=data['units']
        )
    except LedgerError as exc:
        return _error(exc)
    return Response(PropertySerializer(prop).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def property_detail(request, property_id):
    try:
        prop = services.update_property(
            request.user, property_id, name=request.data.get('name'), location=request.data.get('location')
        )
    except LedgerError as exc:
        return _error(exc)
    return Response(PropertySerializer(prop).data)


@api_view(['POST'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def add_unit(request, property_id):
    serializer = AddUnitSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        unit = services.add_unit(request.user, property_id, data['unit_number'], data['rent_amount'])
    except LedgerError as exc:
        return _error(exc)
    return Response(UnitSerializer(unit).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def unit_list(request):
    """
    All units of the logged-in landlord, optionally filtered with ?property=<id>.
    """
    try:
        property_id = _int_param(request, 'property')
    except LedgerError as exc:
        return _error(exc)
    units = selectors.units_for(request.user, property_id=property_id)
    return Response(UnitSerializer(units, many=True).data)


@api_view(['PATCH', 'DELETE'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def unit_detail(request, unit_id):
    if request.method == 'DELETE':
        try:
            services.delete_unit(request.user, unit_id)
        except LedgerError as exc:
            return _error(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = UnitRentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        unit = services.update_unit_rent(request.user, unit_id, serializer.validated_data['rent_amount'])
    except LedgerError as exc:
        return _error(exc)
    return Response(UnitSerializer(unit).data)


@api_view(['POST'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def occupy_unit(request, unit_id):
    serializer = OccupySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        tenant = services.occupy_unit(request.user, unit_id, **serializer.validated_data)
    except LedgerError as exc:
        return _error(exc)
    return Response(TenantSerializer(tenant).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def vacate_unit(request, unit_id):
    try:
        unit = services.vacate_unit(request.user, unit_id)
    except LedgerError as exc:
        return _error(exc)
    return Response({"message": f"Unit {unit.unit_number} is now vacant."})


@api_view(['GET'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def tenant_list(request):
    """
    Tenants with their derived balances (paid - rent; negative means arrears).
    Supports ?property=<id> and ?search=<name/phone/unit>.
    """
    try:
        property_id = _int_param(request, 'property')
    except LedgerError as exc:
        return _error(exc)

    ledgers = _ledgers(request.user, property_id=property_id, search=request.query_params.get('search', '').strip())

    return Response(LedgerEntrySerializer([entry.as_dict() for entry in ledgers], many=True).data)


@api_view(['PATCH'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def tenant_detail(request, tenant_id):
    try:
        tenant = services.update_tenant(
            request.user, tenant_id, name=request.data.get('name'), phone=request.data.get('phone')
        )
    except LedgerError as exc:
        return _error(exc)
    return Response(TenantSerializer(tenant).data)


@api_view(['GET', 'POST'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def payment_list(request):
    if request.method == 'GET':
        payments = selectors.payments_for(request.user).order_by('-payment_date')
        return Response(PaymentSerializer(payments, many=True).data)

    serializer = RecordPaymentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        payment = services.record_payment(
            request.user,
            tenant_id=data['tenant'],
            amount=data['amount'],
            method=data['method'],
            payment_date=data.get('payment_date'),
        )
    except LedgerError as exc:
        return _error(exc)
    return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def payment_receipt(request, payment_id):
    payment = selectors.payments_for(request.user).filter(pk=payment_id).first()
    if payment is None:
        return Response({"detail": "Payment not found."}, status=status.HTTP_404_NOT_FOUND)
    return Response(exports.build_receipt(payment))


@api_view(['GET', 'POST'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def maintenance_list(request):
    if request.method == 'GET':
        requests = selectors.maintenance_for(request.user)
        return Response(MaintenanceRequestSerializer(requests, many=True).data)

    try:
        maintenance = services.open_maintenance_request(
            request.user, request.data.get('unit'), request.data.get('description')
        )
    except LedgerError as exc:
        return _error(exc)
    return Response(MaintenanceRequestSerializer(maintenance).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def advance_maintenance(request, request_id):
    try:
        maintenance = services.advance_maintenance_request(request.user, request_id, request.data.get('status'))
    except LedgerError as exc:
        return _error(exc)
    return Response(MaintenanceRequestSerializer(maintenance).data)


@api_view(['GET'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def dashboard(request):
    profile = services.get_profile(request.user)
    summary = _summary(request.user)
    return Response({
        "full_name": profile.full_name,
        **summary.as_dict(),
    })


@api_view(['GET'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def report(request):
    """
    Key metrics, the monthly collection report and the top debtors.
    """
    payment_rows = selectors.payment_rows(request.user)
    ledgers = _ledgers(request.user)

    return Response({
        "summary": _summary(request.user).as_dict(),
        "monthly": MonthlyTotalSerializer(reports.monthly_report(payment_rows), many=True).data,
        "debtors": LedgerEntrySerializer([entry.as_dict() for entry in reports.top_debtors(ledgers)], many=True).data,
    })


def _csv_response(content, filename):
    response = HttpResponse(content, content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@api_view(['GET'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def monthly_report_csv(request):
    monthly = reports.monthly_report(selectors.payment_rows(request.user))
    if not monthly:
        return Response({"detail": "No data to export"}, status=status.HTTP_404_NOT_FOUND)
    content = exports.to_csv(exports.monthly_report_rows(monthly), exports.MONTHLY_COLUMNS)
    return _csv_response(content, 'keja_zetu_monthly_report.csv')


@api_view(['GET'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def arrears_report_csv(request):
    debtors = reports.top_debtors(_ledgers(request.user))
    if not debtors:
        return Response({"detail": "No data to export"}, status=status.HTTP_404_NOT_FOUND)
    content = exports.to_csv(exports.debtor_rows(debtors), exports.DEBTOR_COLUMNS)
    return _csv_response(content, 'keja_zetu_arrears_report.csv')


@api_view(['GET'])
@authentication_classes([TokenAuthentication])
@permission_classes([IsAuthenticated])
def financial_report_xlsx(request):
    payments = selectors.payments_for(request.user).order_by('-payment_date')
    payment_rows = selectors.payment_rows(request.user)

    content = exports.financial_workbook(
        summary=_summary(request.user),
        monthly=reports.monthly_report(payment_rows),
        debtors=reports.top_debtors(_ledgers(request.user)),
        payments=payments,
    )

    response = HttpResponse(content, content_type=exports.XLSX_CONTENT_TYPE)
    filename = f"financial_report_{timezone.localdate():%Y_%m_%d}.xlsx"
    response['Content-Disposition'] = f'attachment; filename={filename}'
    return response
