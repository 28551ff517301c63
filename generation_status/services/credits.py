import logging
from decimal import Decimal
from django.db import transaction
from django.db.models import F
from ..models import CreditAccount, CreditTransaction

logger = logging.getLogger(__name__)


def refund_credits(user_id, amount, description='Credit refund'):
    amount = Decimal(str(amount))
    with transaction.atomic():
        account, _ = CreditAccount.objects.get_or_create(user_id=user_id)
        CreditAccount.objects.filter(pk=account.pk).update(credits=F('credits') + amount)
        entry = CreditTransaction.objects.create(
            user_id=user_id,
            amount=amount,
            transaction_type='refund',
            description=description,
        )
    logger.info('Refunded %s credits to %s', amount, user_id)
    return entry


def refund_description(subject, error_message=None):
    return f'Refund for failed generation ({subject}): {error_message or "Unknown error"}'
