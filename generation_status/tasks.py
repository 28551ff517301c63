import logging
from celery import shared_task
from django.conf import settings
from django.db import connection
from django.db.utils import OperationalError, InterfaceError
import redis
from .services import credits

logger = logging.getLogger(__name__)


@shared_task(bind=True, autoretry_for=(OperationalError, InterfaceError), retry_kwargs={'max_retries': 3, 'countdown': 5})
def refund_credits(self, user_id, amount, description):
    if not self.request.is_eager:
        connection.close()
    entry = credits.refund_credits(user_id, amount, description)
    return entry.pk


def _broker_available():
    try:
        r = redis.Redis.from_url(settings.CELERY_BROKER_URL)
        return bool(r.ping())
    except redis.RedisError:
        return False


def dispatch_refund(user_id, amount, description):
    # the status write has already happened, so refund errors are only logged
    args = [str(user_id), str(amount), description]
    try:
        if getattr(settings, 'RUN_TASK_INLINE', False) or not _broker_available():
            result = refund_credits.apply(args=args)
            if result.failed():
                logger.error('Inline credit refund for %s failed: %s', user_id, result.result)
            return
        refund_credits.apply_async(args=args)
    except Exception:
        logger.exception('Could not dispatch credit refund for %s', user_id)
