"""
Celery task submit_device_order, run eagerly with task.apply().

requests.post is patched; eager retries re-run the task in-process, so a
persistent failure walks through every retry before the task gives up.
"""
import uuid
from unittest.mock import patch

import pytest
import requests
from celery.exceptions import Retry

from dme.tasks import submit_device_order
from tests.conftest import OrderSubmissionFactory, api_response


@pytest.mark.django_db
class TestSubmitDeviceOrder:

    @patch('dme.services.requests.post')
    def test_success(self, mock_post):
        mock_post.return_value = api_response(201, {'order_id': 'ORD-1'})
        submission = OrderSubmissionFactory()

        submit_device_order.apply(args=[str(submission.id)])

        submission.refresh_from_db()
        assert submission.status == 'submitted'
        assert submission.external_order_id == 'ORD-1'
        mock_post.assert_called_once()

    @patch('dme.services.requests.post', side_effect=requests.ConnectionError('refused'))
    def test_retryable_failure_marks_pending_and_retries(self, mock_post):
        submission = OrderSubmissionFactory()

        with patch.object(submit_device_order, 'retry', side_effect=Retry()) as mock_retry:
            submit_device_order.apply(args=[str(submission.id)])

        # countdown = RETRY_DELAY_SECONDS * 2^0
        assert mock_retry.call_args.kwargs['countdown'] == 2
        submission.refresh_from_db()
        assert submission.status == 'pending'

    @patch('dme.services.requests.post', side_effect=requests.ConnectionError('refused'))
    def test_exponential_backoff(self, mock_post):
        submission = OrderSubmissionFactory()

        with patch.object(submit_device_order, 'retry', side_effect=Retry()) as mock_retry:
            submit_device_order.apply(args=[str(submission.id)], retries=2)

        assert mock_retry.call_args.kwargs['countdown'] == 8

    @patch('dme.services.requests.post', side_effect=requests.ConnectionError('refused'))
    def test_exhausted_retries_mark_failed(self, mock_post):
        submission = OrderSubmissionFactory()

        submit_device_order.apply(args=[str(submission.id)], retries=3)

        submission.refresh_from_db()
        assert submission.status == 'failed'
        assert 'failed after 3 retries' in submission.error_message
        assert 'API_NETWORK_ERROR' in submission.error_message

    @patch('dme.services.requests.post')
    def test_not_retryable_fails_immediately(self, mock_post):
        mock_post.return_value = api_response(401)
        submission = OrderSubmissionFactory()

        with patch.object(submit_device_order, 'retry') as mock_retry:
            submit_device_order.apply(args=[str(submission.id)])

        mock_retry.assert_not_called()
        submission.refresh_from_db()
        assert submission.status == 'failed'
        assert submission.response_status_code == 401
        assert submission.error_message.startswith('API_UNAUTHORIZED')

    @patch('dme.services.requests.post')
    def test_bad_request_not_retried(self, mock_post):
        mock_post.return_value = api_response(400, text='invalid payload')
        submission = OrderSubmissionFactory()

        submit_device_order.apply(args=[str(submission.id)])

        submission.refresh_from_db()
        assert submission.status == 'failed'
        assert submission.attempts == 1
        assert mock_post.call_count == 1

    @patch('dme.services.requests.post')
    def test_already_submitted_skipped(self, mock_post):
        submission = OrderSubmissionFactory(status='submitted')
        submit_device_order.apply(args=[str(submission.id)])
        mock_post.assert_not_called()

    @patch('dme.services.requests.post')
    def test_missing_submission(self, mock_post):
        result = submit_device_order.apply(args=[str(uuid.uuid4())])
        assert result.successful()
        mock_post.assert_not_called()
