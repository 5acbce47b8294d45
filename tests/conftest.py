"""
Shared fixtures for all tests.

factory-boy factories and sample notes live here so both unit/ and
integration/ can import them.
"""
import pytest
from datetime import datetime, timezone as dt_timezone
from unittest.mock import MagicMock
from django.test import Client

import factory
from dme.llm.base import BaseLLMService
from dme.llm.types import LLMResponse
from dme.models import OrderSubmission


FIXED_NOW = datetime(2025, 1, 15, 9, 30, tzinfo=dt_timezone.utc)


def fixed_clock():
    return FIXED_NOW


# ---------------------------------------------------------------------------
# Sample notes
# ---------------------------------------------------------------------------

CPAP_NOTE = (
    'Patient needs a CPAP with full face mask and humidifier. AHI > 20. '
    'Ordered by Dr. Cameron.'
)

CPAP_FULL_NOTE = """Patient Name: Lisa Turner
Patient ID: PT-1001
DOB: 09/23/1984
Diagnosis: Severe sleep apnea
Prescription: CPAP therapy at 10 cmH2O with full face mask and heated humidifier.
AHI > 20.
Ordering Physician: Dr. Foreman."""

OXYGEN_NOTE = """Patient Name: Harold Finch
DOB: 04/12/1952
Diagnosis: COPD
Prescription: Requires a portable oxygen tank delivering 2 L per minute via nasal cannula.
Usage: During sleep and exertion.
Ordering Physician: Dr. Cuddy"""

WHEELCHAIR_NOTE = """Patient Name: Maria Lopez
DOB: 02/02/1960
Diagnosis: Paraplegia
Prescription: Manual wheelchair for daily transport.
Provider: Gregory House"""

NON_DME_NOTE = 'Patient reports mild headache. Follow up in two weeks. Ordered by Dr. Wilson.'


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class OrderSubmissionFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderSubmission

    device_type = 'Oxygen'
    patient_id = factory.Sequence(lambda n: f'PT-{1000 + n}')
    patient_name = 'Harold Finch'
    ordering_provider = 'Dr. Cuddy'
    payload = factory.LazyAttribute(lambda o: {
        'device': 'Oxygen Tank',
        'liters': '2 L',
        'usage': 'sleep and exertion',
        'diagnosis': 'COPD',
        'ordering_provider': o.ordering_provider,
        'patient_name': o.patient_name,
        'dob': '04/12/1952',
    })
    strategy = 'rules'
    status = 'pending'


# ---------------------------------------------------------------------------
# LLM doubles
# ---------------------------------------------------------------------------

class FakeLLMService(BaseLLMService):
    """Returns a canned response, or raises when given an exception."""

    api_key_env = 'FAKE_LLM_API_KEY'

    def __init__(self, content='', error=None):
        self.content = content
        self.error = error
        self.calls = []

    def complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.content, model='fake-model', total_tokens=42)


def api_response(status_code, json_body=None, text=''):
    """requests.Response stand-in for the order API."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_body is None:
        response.json.side_effect = ValueError('no json')
    else:
        response.json.return_value = json_body
    return response


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def offline_settings(settings):
    """No test reaches a real LLM or order API unless it opts back in."""
    settings.LLM_ENABLED = False
    settings.DME_API = {
        'BASE_URL': 'https://alert-api.test',
        'ENDPOINT': '/device-orders',
        'TIMEOUT_SECONDS': 5,
        'RETRY_COUNT': 3,
        'RETRY_DELAY_SECONDS': 2,
        'ENABLED': True,
    }
    return settings


@pytest.fixture
def api_client():
    """Django test client for integration tests."""
    return Client()


@pytest.fixture
def fake_llm():
    return FakeLLMService
