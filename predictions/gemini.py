"""Wait-time predictions and staff suggestions from the Gemini API.

Both helpers degrade to fixed text on any failure; callers never see an
exception from here.
"""
import json
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

GENERATE_URL = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'

FALLBACK_PREDICTION = {
    'explanation': 'Wait times are currently fluctuating.',
    'optimizedTip': 'We suggest staying close as your turn might come sooner than expected.',
}
FALLBACK_ANALYTICS = 'Staff allocation looks optimal for current traffic.'
EMPTY_ANALYTICS = 'Keep monitoring real-time flow.'

PREDICTION_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'explanation': {'type': 'STRING', 'description': 'Friendly explanation of wait time'},
        'optimizedTip': {'type': 'STRING', 'description': 'Optimization tip for the user'},
    },
    'required': ['explanation', 'optimizedTip'],
}


class GenerationError(Exception):
    pass


def _generate(prompt, generation_config=None):
    """POST one prompt to generateContent and return the first candidate's text."""
    api_key = settings.GEMINI_API_KEY
    if not api_key:
        raise GenerationError('GEMINI_API_KEY is not set')

    payload = {'contents': [{'parts': [{'text': prompt}]}]}
    if generation_config:
        payload['generationConfig'] = generation_config

    r = requests.post(
        GENERATE_URL.format(model=settings.GEMINI_MODEL),
        headers={'x-goog-api-key': api_key},
        json=payload,
        timeout=settings.GEMINI_TIMEOUT,
    )
    if r.status_code >= 400:
        raise GenerationError(f'HTTP {r.status_code}: {r.text[:200]}')

    try:
        parts = r.json()['candidates'][0]['content']['parts']
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise GenerationError(f'Unexpected response shape: {e}')
    return ''.join(p.get('text', '') for p in parts)


def get_wait_time_prediction(service_name, queue_length, avg_time):
    """Return {'explanation': str, 'optimizedTip': str} for a queue."""
    prompt = (
        f'Predict wait time and give a smart tip for a queue of {queue_length} people '
        f'for "{service_name}" (avg {avg_time} mins/person).'
    )
    try:
        text = _generate(prompt, {
            'responseMimeType': 'application/json',
            'responseSchema': PREDICTION_SCHEMA,
        })
        data = json.loads(text or '{}')
        explanation = data.get('explanation')
        tip = data.get('optimizedTip')
        if not isinstance(explanation, str) or not isinstance(tip, str):
            raise GenerationError('Prediction is missing explanation or optimizedTip')
        return {'explanation': explanation, 'optimizedTip': tip}
    except Exception as e:
        logger.warning('Gemini prediction failed, using fallback: %s', e)
        return dict(FALLBACK_PREDICTION)


def get_admin_analytics(queue_data):
    """Short staff-allocation suggestion for an owner's live queue."""
    prompt = (
        'Analyze this queue data and provide a brief strategic suggestion for staff '
        f'allocation to reduce wait times: {json.dumps(queue_data, default=str)}'
    )
    try:
        text = _generate(prompt)
    except Exception as e:
        logger.warning('Gemini analytics failed, using fallback: %s', e)
        return FALLBACK_ANALYTICS
    return text.strip() or EMPTY_ANALYTICS
