"""Pytest configuration and fixtures."""

import pytest

from accounts.models import Role, User
from businesses.models import Business, Service


@pytest.fixture(autouse=True)
def _isolated_settings(settings, monkeypatch):
    # No background threads or real providers in tests
    settings.SMS_BACKGROUND = False
    settings.GEMINI_API_KEY = 'test-key'
    for name in ('SMS_ACCOUNT_SID', 'SMS_AUTH_TOKEN', 'SMS_FROM_NUMBER', 'SMS_SIMULATE'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def _make(role=Role.CUSTOMER, full_name=None, **extra):
        counter['n'] += 1
        n = counter['n']
        return User.objects.create_user(
            username=f'user{n}@example.com',
            email=f'user{n}@example.com',
            password='queue-pass-123',
            full_name=full_name if full_name is not None else f'Customer {n}',
            role=role,
            **extra,
        )

    return _make


@pytest.fixture
def owner(make_user):
    return make_user(role=Role.ADMIN, full_name='Olivia Owner')


@pytest.fixture
def customer(make_user):
    return make_user(full_name='Casey Customer')


@pytest.fixture
def business(owner):
    return Business.objects.create(
        owner=owner,
        name='City Health Center',
        category='Healthcare',
        location='123 Medical Dr, Downtown',
    )


@pytest.fixture
def service(business):
    return Service.objects.create(
        business=business,
        name='general consultation',
        description='Routine checkups and non-emergencies',
        average_service_time=15,
    )


@pytest.fixture
def other_business(make_user):
    other_owner = make_user(role=Role.ADMIN, full_name='Bob Banker')
    business = Business.objects.create(
        owner=other_owner,
        name='Metropolis Bank',
        category='Finance',
        location='456 Wealth Ave',
    )
    Service.objects.create(business=business, name='Teller Services', average_service_time=8)
    return business


@pytest.fixture
def owner_client(client, owner):
    client.force_login(owner)
    return client


@pytest.fixture
def customer_client(client, customer):
    client.force_login(customer)
    return client
