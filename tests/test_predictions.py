import json
from unittest import mock

import pytest
import requests

from predictions import gemini
from queue_system import ledger

FALLBACK = {
    'explanation': 'Wait times are currently fluctuating.',
    'optimizedTip': 'We suggest staying close as your turn might come sooner than expected.',
}


def _response(payload, status_code=200):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.text = json.dumps(payload)
    resp.json.return_value = payload
    return resp


def _candidate(text):
    return {'candidates': [{'content': {'parts': [{'text': text}]}}]}


def test_prediction_parses_structured_reply():
    reply = {'explanation': 'About 45 minutes.', 'optimizedTip': 'Come back after lunch.'}
    with mock.patch('predictions.gemini.requests.post', return_value=_response(_candidate(json.dumps(reply)))) as post:
        result = gemini.get_wait_time_prediction('Vaccination', 3, 15)

    assert result == reply
    payload = post.call_args.kwargs['json']
    assert '"Vaccination"' in payload['contents'][0]['parts'][0]['text']
    assert payload['generationConfig']['responseMimeType'] == 'application/json'
    assert post.call_args.kwargs['headers'] == {'x-goog-api-key': 'test-key'}


def test_prediction_network_error_uses_fallback():
    with mock.patch('predictions.gemini.requests.post', side_effect=requests.ConnectionError('offline')):
        assert gemini.get_wait_time_prediction('Vaccination', 3, 15) == FALLBACK


@pytest.mark.parametrize('response', [
    _response({'error': {'message': 'quota'}}, status_code=429),
    _response({'candidates': []}),
    _response(_candidate('not json at all')),
    _response(_candidate(json.dumps({'explanation': 'only half'}))),
])
def test_prediction_bad_replies_use_fallback(response):
    with mock.patch('predictions.gemini.requests.post', return_value=response):
        assert gemini.get_wait_time_prediction('Teller Services', 0, 8) == FALLBACK


def test_prediction_without_api_key_skips_the_call(settings):
    settings.GEMINI_API_KEY = ''
    with mock.patch('predictions.gemini.requests.post') as post:
        assert gemini.get_wait_time_prediction('Teller Services', 2, 8) == FALLBACK
    post.assert_not_called()


def test_fallback_is_a_fresh_copy():
    with mock.patch('predictions.gemini.requests.post', side_effect=requests.Timeout()):
        first = gemini.get_wait_time_prediction('x', 1, 1)
    first['explanation'] = 'changed'
    assert gemini.FALLBACK_PREDICTION == FALLBACK


def test_admin_analytics_returns_text():
    with mock.patch('predictions.gemini.requests.post', return_value=_response(_candidate('Open a second counter.\n'))):
        assert gemini.get_admin_analytics({'waiting': 9}) == 'Open a second counter.'


def test_admin_analytics_empty_and_failure():
    with mock.patch('predictions.gemini.requests.post', return_value=_response(_candidate('   '))):
        assert gemini.get_admin_analytics({}) == 'Keep monitoring real-time flow.'
    with mock.patch('predictions.gemini.requests.post', side_effect=requests.ConnectionError()):
        assert gemini.get_admin_analytics({}) == 'Staff allocation looks optimal for current traffic.'


@pytest.mark.django_db
def test_prediction_view_uses_live_queue_length(customer_client, business, service, make_user):
    for _ in range(3):
        ledger.join(business, service, make_user())

    with mock.patch('predictions.views.get_wait_time_prediction', return_value=dict(FALLBACK)) as predict:
        resp = customer_client.get(f'/predictions/services/{service.pk}/')

    assert resp.status_code == 200
    predict.assert_called_once_with('general consultation', 3, 15)
    body = resp.json()
    assert body['queue_length'] == 3
    assert body['explanation'] == FALLBACK['explanation']
