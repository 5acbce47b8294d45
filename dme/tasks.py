import logging
from celery import shared_task
from django.conf import settings

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=settings.DME_API['RETRY_COUNT'],
    default_retry_delay=settings.DME_API['RETRY_DELAY_SECONDS'],   # doubled on every retry
    acks_late=True,           # ack only after the task body finishes
    reject_on_worker_lost=True,
)
def submit_device_order(self, submission_id: str):
    """
    Post a stored OrderSubmission to the DME order API.

    Retry policy:
      - retryable failures (network, timeout, 5xx): up to DME_API['RETRY_COUNT'] retries
      - exponential backoff: delay → 2·delay → 4·delay
      - non-retryable failures or exhausted retries mark the submission failed
    """
    from dme.exceptions import BaseAppException, UpstreamUnavailableError
    from dme.models import OrderSubmission
    from dme.services import deliver_submission, mark_submission_failed, mark_submission_pending

    logger.info('[Celery][submit_device_order] submission_id=%s (attempt %d/%d)',
                submission_id, self.request.retries + 1, self.max_retries + 1)

    try:
        submission = OrderSubmission.objects.get(id=submission_id)
    except OrderSubmission.DoesNotExist:
        logger.error('[Celery] Submission %s does not exist, skipping', submission_id)
        return  # nothing to retry

    if submission.status == 'submitted':
        logger.info('[Celery] Submission %s already submitted, skipping', submission_id)
        return

    try:
        deliver_submission(submission)
        logger.info('[Celery] submission_id=%s finished with status %s', submission_id, submission.status)

    except Exception as exc:
        retryable = not isinstance(exc, BaseAppException) or (
            isinstance(exc, UpstreamUnavailableError) and exc.retryable
        )
        status_code = (getattr(exc, 'detail', None) or {}).get('status_code') \
            if isinstance(exc, BaseAppException) else None
        logger.warning('[Celery] submission_id=%s failed (attempt %d): %s',
                       submission_id, self.request.retries + 1, str(exc))

        if retryable and self.request.retries < self.max_retries:
            # countdown = delay * 2^retries
            countdown = self.default_retry_delay * (2 ** self.request.retries)
            logger.info('[Celery] Retrying in %ds (retry %d)...', countdown, self.request.retries + 1)
            mark_submission_pending(submission)
            raise self.retry(exc=exc, countdown=countdown)

        code = getattr(exc, 'code', type(exc).__name__)
        if retryable:
            logger.error('[Celery] submission_id=%s exhausted retries, marking failed', submission_id)
            message = f'[failed after {self.max_retries} retries] {code}: {exc}'
        else:
            message = f'{code}: {exc}'
        mark_submission_failed(submission, message, status_code=status_code)
