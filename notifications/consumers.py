# notifications/consumers.py
import json
from channels.generic.websocket import AsyncWebsocketConsumer

from .dispatch import business_group, user_group


class _GroupConsumer(AsyncWebsocketConsumer):
    group_name = None

    def get_group_name(self):
        raise NotImplementedError

    async def connect(self):
        user = self.scope.get('user')
        if user is None or not user.is_authenticated:
            await self.close()
            return

        self.group_name = self.get_group_name()
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if self.group_name:
            await self.channel_layer.group_discard(self.group_name, self.channel_name)


class TokenAlertConsumer(_GroupConsumer):
    """Personal alerts for the signed-in user."""

    def get_group_name(self):
        return user_group(self.scope['user'].pk)

    async def token_serving(self, event):
        await self.send(text_data=json.dumps({
            'message': event['message'],
            'data': {
                'token_id': event['token_id'],
                'token_number': event['token_number'],
            },
        }))


class LedgerConsumer(_GroupConsumer):
    """Change feed for one business's queue."""

    def get_group_name(self):
        return business_group(self.scope['url_route']['kwargs']['business_id'])

    async def ledger_change(self, event):
        await self.send(text_data=json.dumps({
            'message': 'ledger.change',
            'data': {
                'business_id': event['business_id'],
                'token': event['token'],
            },
        }))
