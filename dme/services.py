"""
Service layer between the HTTP / CLI surfaces and the extraction engine.

The engine returns ExtractionResult and never raises; this is where a
failed result turns into an exception (raise_for_result) that the
exception handler or the management command reports.
"""

import logging

import requests
from django.conf import settings
from django.utils import timezone

from .exceptions import BlockError, UpstreamUnavailableError, ValidationError, raise_for_result
from .extraction.strategies import build_selector
from .extraction.types import ExtractionContext
from .intake.factory import get_adapter, source_for
from .models import OrderSubmission
from .serializers import serialize_device_order

logger = logging.getLogger(__name__)


# ── Extraction ─────────────────────────────────────────────────────────────

def read_note(raw_body, source=None, content_type='', filename=''):
    """Raw body / file content → NoteInput. source overrides detection."""
    source = source or source_for(content_type=content_type, filename=filename)
    adapter = get_adapter(source, raw_body, content_type=content_type, filename=filename)
    return adapter.process()


def extract_order(note_input, use_llm=True):
    """
    NoteInput → successful ExtractionResult[DeviceOrder].

    Raises ValidationError / ParsingFailedError / ExtractionFailedError when
    the engine reports errors.
    """
    context = ExtractionContext(source=note_input.source, filename=note_input.filename)
    selector = build_selector(use_llm=use_llm)
    result = selector.extract(note_input.text, context)

    if result.is_error:
        logger.warning('[%s] Extraction failed: %s', context.correlation_id,
                       '; '.join(f'{e.code}: {e.description}' for e in result.errors))
    raise_for_result(result)

    logger.info('[%s] Extracted %s order via %s strategy', context.correlation_id,
                result.value.device_type, result.strategy)
    return result


def extract_note(raw_body, source=None, content_type='', filename='', use_llm=True):
    """read_note + extract_order."""
    note_input = read_note(raw_body, source=source, content_type=content_type, filename=filename)
    return extract_order(note_input, use_llm=use_llm)


# ── Order API ──────────────────────────────────────────────────────────────

def _api_url():
    api = settings.DME_API
    return api['BASE_URL'].rstrip('/') + api['ENDPOINT']


def post_device_order(payload):
    """
    POST the serialized order to the DME order API.

    Returns {'status_code', 'order_id', 'body'} on 2xx.

    Raises:
        UpstreamUnavailableError: network error, timeout, 5xx (retryable);
                                  401/403 and other statuses (not retryable)
        ValidationError:          400, the API rejected the payload
    """
    url = _api_url()
    timeout = settings.DME_API['TIMEOUT_SECONDS']
    logger.info('Posting %s order to %s', payload.get('device'), url)

    try:
        response = requests.post(url, json=payload, timeout=timeout)
    except requests.Timeout as exc:
        raise UpstreamUnavailableError(
            message=f"Request to '{url}' timed out after {timeout} seconds.",
            code='API_TIMEOUT',
            detail={'url': url},
        ) from exc
    except requests.ConnectionError as exc:
        raise UpstreamUnavailableError(
            message=f"Network error when calling '{url}': {exc}",
            code='API_NETWORK_ERROR',
            detail={'url': url},
        ) from exc
    except requests.RequestException as exc:
        raise UpstreamUnavailableError(
            message=f"Request to '{url}' failed: {exc}",
            code='API_REQUEST_FAILED',
            detail={'url': url},
            retryable=False,
        ) from exc

    status = response.status_code
    body_text = response.text[:500]

    if 200 <= status < 300:
        try:
            body = response.json()
        except ValueError:
            body = None
        order_id = body.get('order_id') if isinstance(body, dict) else None
        logger.info('Order API accepted order (status=%d, order_id=%s)', status, order_id)
        return {'status_code': status, 'order_id': order_id, 'body': body}

    detail = {'url': url, 'status_code': status, 'response': body_text}

    if status == 400:
        raise ValidationError(
            message=f"Bad request to '{url}': {body_text}",
            code='API_BAD_REQUEST',
            detail=detail,
        )
    if status in (401, 403):
        raise UpstreamUnavailableError(
            message=f"Unauthorized access to '{url}'. Check your API credentials.",
            code='API_UNAUTHORIZED',
            detail=detail,
            retryable=False,
        )
    if status >= 500:
        raise UpstreamUnavailableError(
            message=f"The API service at '{url}' is currently unavailable.",
            code='API_SERVICE_UNAVAILABLE',
            detail=detail,
        )
    raise UpstreamUnavailableError(
        message=f"Unexpected response from '{url}' (Status: {status}): {body_text}",
        code='API_UNEXPECTED_RESPONSE',
        detail=detail,
        retryable=False,
    )


# ── Submissions ────────────────────────────────────────────────────────────

def _dispatch(submission):
    from dme.tasks import submit_device_order
    submit_device_order.delay(str(submission.id))
    logger.info('Queued submission %s', submission.id)


def create_submission(order, strategy):
    """Persist a pending OrderSubmission and queue the Celery task."""
    submission = OrderSubmission.objects.create(
        device_type=order.device_type,
        patient_id=order.patient_id,
        patient_name=order.patient_name,
        ordering_provider=order.ordering_provider,
        payload=serialize_device_order(order),
        strategy=strategy or 'rules',
        status='pending',
    )
    _dispatch(submission)
    return submission


def get_submission_detail(submission_id):
    """Get submission by ID. Raises BlockError (404) if not found."""
    try:
        return OrderSubmission.objects.get(id=submission_id)
    except OrderSubmission.DoesNotExist:
        raise BlockError(
            message='Submission not found',
            code='SUBMISSION_NOT_FOUND',
            detail={'submission_id': str(submission_id)},
            http_status=404,
        )


def retry_submission(submission_id):
    """Re-queue a failed submission."""
    submission = get_submission_detail(submission_id)

    if submission.status == 'submitted':
        raise BlockError(
            message='Order was already submitted',
            code='SUBMISSION_ALREADY_SENT',
            detail={'submission_id': str(submission.id),
                    'external_order_id': submission.external_order_id},
        )
    if submission.status != 'failed':
        raise BlockError(
            message='Submission is still queued or in progress',
            code='SUBMISSION_IN_PROGRESS',
            detail={'submission_id': str(submission.id), 'current_status': submission.status},
        )

    submission.status = 'pending'
    submission.error_message = None
    submission.save(update_fields=['status', 'error_message', 'updated_at'])
    _dispatch(submission)
    return submission


def deliver_submission(submission):
    """
    Post one submission once and record the outcome on success.

    Exceptions from post_device_order propagate; the Celery task decides
    between retrying and mark_submission_failed().
    """
    if not settings.DME_API.get('ENABLED', True):
        logger.warning('Order API disabled; submission %s not sent', submission.id)
        mark_submission_failed(submission, 'API_DISABLED: order API submission is disabled')
        return submission

    submission.status = 'processing'
    submission.attempts += 1
    submission.save(update_fields=['status', 'attempts', 'updated_at'])

    outcome = post_device_order(submission.payload)

    submission.status = 'submitted'
    submission.response_status_code = outcome['status_code']
    submission.external_order_id = outcome['order_id']
    submission.error_message = None
    submission.submitted_at = timezone.now()
    submission.save(update_fields=[
        'status', 'response_status_code', 'external_order_id',
        'error_message', 'submitted_at', 'updated_at',
    ])
    return submission


def mark_submission_pending(submission):
    submission.status = 'pending'
    submission.save(update_fields=['status', 'updated_at'])


def mark_submission_failed(submission, message, status_code=None):
    submission.status = 'failed'
    submission.error_message = message
    if status_code is not None:
        submission.response_status_code = status_code
    submission.save(update_fields=['status', 'error_message', 'response_status_code', 'updated_at'])
