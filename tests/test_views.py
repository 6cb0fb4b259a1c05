from unittest import mock

import pytest
from django.db import DatabaseError
from django.test import Client

from accounts.models import Role, User
from admin_panel.models import BusinessLog
from businesses.models import LikedPlace
from queue_system import ledger
from queue_system.models import Token

pytestmark = pytest.mark.django_db


def _join_url(business, service):
    return f'/businesses/{business.pk}/services/{service.pk}/join/'


# -------------------- accounts --------------------

def test_register_creates_user_with_role(client):
    resp = client.post('/accounts/register/', {
        'email': 'owner@example.com',
        'full_name': 'Olive Owner',
        'role': 'ADMIN',
        'password1': 'a-long-queue-pass',
        'password2': 'a-long-queue-pass',
    })

    assert resp.status_code == 201
    assert resp.json()['session']['role'] == 'ADMIN'
    user = User.objects.get(email='owner@example.com')
    assert user.username == 'owner@example.com'
    assert user.is_owner
    assert client.get('/accounts/session/').json()['session']['email'] == 'owner@example.com'


def test_register_reports_literal_error(client, customer):
    resp = client.post('/accounts/register/', {
        'email': customer.email,
        'full_name': 'Dup',
        'role': 'CUSTOMER',
        'password1': 'a-long-queue-pass',
        'password2': 'a-long-queue-pass',
    })
    assert resp.status_code == 400
    assert 'email' in resp.json()['error'].lower()


def test_login_failure_returns_message(client, customer):
    resp = client.post('/accounts/login/', {'email': customer.email, 'password': 'wrong'})
    assert resp.status_code == 400
    assert resp.json() == {'error': 'Invalid login credentials'}


def test_login_and_logout(client, customer):
    resp = client.post('/accounts/login/', {'email': customer.email, 'password': 'queue-pass-123'})
    assert resp.status_code == 200
    assert resp.json()['session']['name'] == 'Casey Customer'

    client.post('/accounts/logout/')
    assert client.get('/accounts/session/').json() == {'session': None}


def test_profile_lists_visits_likes_and_listings(client, owner, business, service, customer):
    token = ledger.join(business, service, customer)
    ledger.call_next(business)
    ledger.call_next(business)
    LikedPlace.objects.create(user=customer, business=business)

    client.force_login(customer)
    body = client.get('/accounts/profile/').json()

    assert [t['id'] for t in body['visited_places']] == [str(token.pk)]
    assert body['visited_places'][0]['business_name'] == business.name
    assert [b['id'] for b in body['liked_places']] == [str(business.pk)]
    assert body['my_listings'] == []

    client.force_login(owner)
    assert [b['id'] for b in client.get('/accounts/profile/').json()['my_listings']] == [str(business.pk)]


# -------------------- home dispatch --------------------

def test_home_dispatches_on_role(customer, owner, business):
    c = Client()
    c.force_login(customer)
    assert c.get('/').json()['view'] == Role.CUSTOMER

    o = Client()
    o.force_login(owner)
    body = o.get('/').json()
    assert body['view'] == Role.ADMIN
    assert body['business']['id'] == str(business.pk)


def test_home_requires_login(client):
    assert client.get('/').status_code == 302


def test_home_is_read_only_for_every_role(customer_client, owner, business):
    assert customer_client.post('/').status_code == 405

    o = Client()
    o.force_login(owner)
    assert o.post('/').status_code == 405


# -------------------- businesses --------------------

def test_business_list_search_and_like(customer_client, business, other_business):
    names = [b['name'] for b in customer_client.get('/businesses/?q=finance').json()['businesses']]
    assert names == ['Metropolis Bank']

    liked = customer_client.post(f'/businesses/{business.pk}/like/').json()
    assert liked['isLiked'] is True
    listing = {b['id']: b for b in customer_client.get('/businesses/').json()['businesses']}
    assert listing[str(business.pk)]['isLiked'] is True
    assert listing[str(other_business.pk)]['isLiked'] is False

    assert customer_client.post(f'/businesses/{business.pk}/like/').json()['isLiked'] is False


def test_join_endpoint_creates_waiting_token(customer_client, business, service):
    resp = customer_client.post(_join_url(business, service), {'notes': 'running late'})

    assert resp.status_code == 201
    token = resp.json()['token']
    assert token['status'] == 'WAITING'
    assert token['position'] == 1
    assert token['notes'] == 'running late'
    assert token['customer_name'] == 'Casey Customer'
    assert token['isActive'] is True


def test_join_endpoint_refuses_second_active_booking(customer_client, business, service, other_business):
    first = customer_client.post(_join_url(business, service)).json()['token']
    other_service = other_business.services.get()

    resp = customer_client.post(_join_url(other_business, other_service))

    assert resp.status_code == 409
    assert resp.json()['token']['id'] == first['id']
    assert Token.objects.count() == 1


def test_join_endpoint_reports_booking_failed(customer_client, business, service):
    with mock.patch.object(Token.objects, 'create', side_effect=DatabaseError('disk full')):
        resp = customer_client.post(_join_url(business, service))
    assert resp.status_code == 400
    assert resp.json() == {'error': 'booking_failed', 'message': 'Booking failed.'}


def test_join_with_mismatched_service_is_404(customer_client, business, other_business):
    other_service = other_business.services.get()
    assert customer_client.post(_join_url(business, other_service)).status_code == 404


# -------------------- customer queue endpoints --------------------

def test_active_token_and_cancel(customer_client, business, service, customer):
    token = ledger.join(business, service, customer)

    body = customer_client.get('/queue/tokens/active/').json()
    assert body['token']['id'] == str(token.pk)
    assert body['eta']['live_rank'] == 1

    resp = customer_client.post(f'/queue/tokens/{token.pk}/cancel/')
    assert resp.json() == {'status': 'CANCELLED', 'token_id': str(token.pk)}
    assert customer_client.get('/queue/tokens/active/').json() == {'token': None}


def test_cancel_someone_elses_token_is_404(customer_client, business, service, make_user):
    token = ledger.join(business, service, make_user())
    assert customer_client.post(f'/queue/tokens/{token.pk}/cancel/').status_code == 404


def test_cancel_serving_token_conflicts(customer_client, business, service, customer):
    token = ledger.join(business, service, customer)
    ledger.call_next(business)
    resp = customer_client.post(f'/queue/tokens/{token.pk}/cancel/')
    assert resp.status_code == 409
    assert resp.json()['error'] == 'invalid_transition'


def test_token_list_is_in_arrival_order(customer_client, business, service, other_business, make_user):
    a = ledger.join(business, service, make_user())
    b = ledger.join(other_business, other_business.services.get(), make_user())
    c = ledger.join(business, service, make_user())

    everything = [t['id'] for t in customer_client.get('/queue/tokens/').json()['tokens']]
    assert everything == [str(a.pk), str(b.pk), str(c.pk)]

    mine = [t['id'] for t in customer_client.get(f'/queue/tokens/?business={business.pk}').json()['tokens']]
    assert mine == [str(a.pk), str(c.pk)]


def test_token_status_is_private(client, business, service, customer, make_user):
    token = ledger.join(business, service, customer)
    client.force_login(make_user())
    assert client.get(f'/queue/tokens/{token.pk}/').status_code == 403

    client.force_login(business.owner)
    assert client.get(f'/queue/tokens/{token.pk}/').json()['eta']['position'] == 1


# -------------------- owner console --------------------

def test_owner_call_next_and_dashboard(owner_client, business, service, make_user):
    first = ledger.join(business, service, make_user())
    second = ledger.join(business, service, make_user())

    resp = owner_client.post(f'/owner/business/{business.pk}/call-next/')
    assert resp.status_code == 200
    assert resp.json() == {'completed': None, 'serving': mock.ANY}
    assert resp.json()['serving']['id'] == str(first.pk)

    queue = owner_client.get(f'/owner/business/{business.pk}/').json()
    assert queue['serving']['id'] == str(first.pk)
    assert [(t['id'], t['index']) for t in queue['waiting']] == [(str(second.pk), 1)]

    resp = owner_client.post(
        f'/owner/business/{business.pk}/call-next/', {'current_serving_id': str(first.pk)}
    )
    assert resp.json()['completed']['id'] == str(first.pk)
    assert resp.json()['serving']['id'] == str(second.pk)


def test_owner_call_next_on_empty_queue(owner_client, business):
    resp = owner_client.post(f'/owner/business/{business.pk}/call-next/')
    assert resp.json() == {'completed': None, 'serving': None}


def test_owner_force_status(owner_client, business, service, customer):
    token = ledger.join(business, service, customer)

    resp = owner_client.post(f'/owner/token/{token.pk}/status/', {'status': 'SERVING'})
    assert resp.json()['token']['status'] == 'SERVING'

    resp = owner_client.post(f'/owner/token/{token.pk}/status/', {'status': 'WAITING'})
    assert resp.status_code == 409

    resp = owner_client.post(f'/owner/token/{token.pk}/status/', {'status': 'COMPLETED'})
    assert resp.json()['token']['status'] == 'COMPLETED'


def test_customers_cannot_use_owner_console(customer_client, business):
    assert customer_client.post(f'/owner/business/{business.pk}/call-next/').status_code == 403
    assert customer_client.get('/owner/').status_code == 403


def test_owner_cannot_touch_other_businesses(owner_client, other_business):
    assert owner_client.post(f'/owner/business/{other_business.pk}/call-next/').status_code == 404


def test_pause_resume_and_logs(owner_client, business, service, customer):
    ledger.join(business, service, customer)

    assert owner_client.post(f'/owner/business/{business.pk}/pause/').json()['isOpen'] is False
    assert owner_client.post(f'/owner/business/{business.pk}/call-next/').json()['serving'] is None
    assert owner_client.post(f'/owner/business/{business.pk}/resume/').json()['isOpen'] is True

    logs = owner_client.get(f'/owner/business/{business.pk}/logs/').json()['logs']
    assert [log['action'] for log in logs][:3] == ['resume', 'call_next', 'pause']
    assert logs[-1]['metadata']['customer_name'] == 'Casey Customer'
    assert BusinessLog.objects.filter(business=business).count() == len(logs)


def test_logs_are_capped_at_twenty(owner_client, business, service, make_user):
    for _ in range(12):
        token = ledger.join(business, service, make_user())
        ledger.cancel(token.pk, token.user)
    assert len(owner_client.get(f'/owner/business/{business.pk}/logs/').json()['logs']) == 20


def test_owner_analytics(owner_client, business, service, customer):
    ledger.join(business, service, customer)
    with mock.patch('admin_panel.views.get_admin_analytics', return_value='Add a counter.') as analytics:
        resp = owner_client.get(f'/owner/business/{business.pk}/analytics/')

    assert resp.json() == {'suggestion': 'Add a counter.'}
    queue_data = analytics.call_args.args[0]
    assert queue_data['waiting'] == 1
    assert queue_data['serving'] is None


def test_profile_listings_only_for_owner_role(client, business):
    demoted = business.owner
    demoted.role = Role.CUSTOMER
    demoted.save(update_fields=['role'])

    client.force_login(demoted)
    assert client.get('/accounts/profile/').json()['my_listings'] == []
