import logging
from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def flatten_issues(detail, prefix=''):
    issues = []
    if isinstance(detail, dict):
        for key, value in detail.items():
            field = key if key != 'non_field_errors' else ''
            path = f'{prefix}.{field}' if prefix and field else (field or prefix)
            issues.extend(flatten_issues(value, path))
    elif isinstance(detail, list):
        for index, value in enumerate(detail):
            if isinstance(value, dict):
                issues.extend(flatten_issues(value, f'{prefix}[{index}]'))
            elif isinstance(value, list):
                issues.extend(flatten_issues(value, prefix))
            else:
                issues.append({'field': prefix or None, 'message': str(value)})
    else:
        issues.append({'field': prefix or None, 'message': str(detail)})
    return issues


def webhook_exception_handler(exc, context):
    if isinstance(exc, DatabaseError):
        logger.exception('Database error while handling %s', context.get('view').__class__.__name__)
        return Response(
            {'success': False, 'error': 'Failed to update record', 'details': str(exc)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            'success': False,
            'error': 'Invalid payload',
            'issues': flatten_issues(exc.detail),
        }
    elif isinstance(exc, exceptions.Throttled):
        response.data = {
            'success': False,
            'error': 'Too many requests',
            'retry_after': exc.wait,
        }
    elif isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.data = {'success': False, 'error': 'Unauthorized'}
    else:
        response.data = {'success': False, 'error': str(exc.detail)}
    return response
