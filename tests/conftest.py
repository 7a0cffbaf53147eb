from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from rentals import services


@pytest.fixture
def owner(db):
    return services.register_user('landlord', 'landlord@example.com', 'securepass123', full_name='Keja Admin')


@pytest.fixture
def other_owner(db):
    return get_user_model().objects.create_user(username='someone-else', password='securepass123')


@pytest.fixture
def sunset(owner):
    """Property with one occupied unit (A1, rent 15000) and one vacant unit (A2, rent 12000)."""
    return services.create_property(
        owner,
        name='Sunset',
        location='Kilimani',
        units=[
            {'unit_number': 'A1', 'rent_amount': Decimal('15000'), 'status': 'occupied',
             'tenant_name': 'Wanjiku', 'tenant_phone': '0712000001'},
            {'unit_number': 'A2', 'rent_amount': Decimal('12000'), 'status': 'vacant'},
        ],
    )


@pytest.fixture
def occupied_unit(sunset):
    return sunset.units.get(unit_number='A1')


@pytest.fixture
def vacant_unit(sunset):
    return sunset.units.get(unit_number='A2')


@pytest.fixture
def tenant(occupied_unit):
    return occupied_unit.tenant


@pytest.fixture
def api_client(owner):
    token, _ = Token.objects.get_or_create(user=owner)
    api = APIClient()
    api.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')
    return api
