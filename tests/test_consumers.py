import uuid
from types import SimpleNamespace

import pytest
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from notifications.routing import websocket_urlpatterns

application = URLRouter(websocket_urlpatterns)


def _user(pk=7):
    return SimpleNamespace(pk=pk, is_authenticated=True)


def _communicator(path, user):
    communicator = WebsocketCommunicator(application, path)
    communicator.scope['user'] = user
    return communicator


@pytest.mark.asyncio
async def test_alert_socket_receives_serving_message():
    communicator = _communicator('/ws/alerts/', _user(pk=7))
    connected, _ = await communicator.connect()
    assert connected

    await get_channel_layer().group_send('user_7', {
        'type': 'token.serving',
        'message': "It's your turn! Your token V-321 is being served.",
        'token_id': 'abc',
        'token_number': 'V-321',
    })

    received = await communicator.receive_json_from()
    assert received['message'].endswith('V-321 is being served.')
    assert received['data'] == {'token_id': 'abc', 'token_number': 'V-321'}
    await communicator.disconnect()


@pytest.mark.asyncio
async def test_business_feed_receives_changes():
    business_id = uuid.uuid4()
    communicator = _communicator(f'/ws/businesses/{business_id}/', _user())
    connected, _ = await communicator.connect()
    assert connected

    await get_channel_layer().group_send(f'business_{business_id}', {
        'type': 'ledger.change',
        'business_id': str(business_id),
        'token': {'id': 't1', 'status': 'CANCELLED'},
    })

    received = await communicator.receive_json_from()
    assert received['message'] == 'ledger.change'
    assert received['data']['token']['status'] == 'CANCELLED'
    await communicator.disconnect()


@pytest.mark.asyncio
async def test_anonymous_socket_is_refused():
    anonymous = SimpleNamespace(pk=None, is_authenticated=False)
    communicator = _communicator('/ws/alerts/', anonymous)
    connected, _ = await communicator.connect()
    assert not connected
