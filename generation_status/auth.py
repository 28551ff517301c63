import hmac
import logging
from django.conf import settings
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from drf_spectacular.extensions import OpenApiAuthenticationExtension

logger = logging.getLogger(__name__)


class WebhookCaller:
    is_authenticated = True
    is_anonymous = False

    def __init__(self, key_index):
        self.key_index = key_index

    def __str__(self):
        return f'webhook-caller[{self.key_index}]'


def match_secret(api_key, secrets):
    presented = api_key.encode('utf-8')
    match = None
    for index, secret in enumerate(secrets):
        # compare against every secret so timing does not reveal which one matched
        if hmac.compare_digest(presented, secret.encode('utf-8')) and match is None:
            match = index
    return match


class WebhookSecretAuthentication(BaseAuthentication):
    keyword = 'ApiKey'

    def authenticate(self, request):
        api_key = request.META.get('HTTP_X_API_KEY')
        if not api_key:
            auth = request.headers.get('Authorization')
            if auth and auth.startswith(f'{self.keyword} '):
                api_key = auth.split(' ', 1)[1].strip()
        if not api_key:
            return None
        index = match_secret(api_key, settings.WEBHOOK_SECRETS)
        if index is None:
            logger.warning('Rejected webhook call with invalid API key')
            raise AuthenticationFailed('Invalid API key')
        return (WebhookCaller(index), api_key)

    def authenticate_header(self, request):
        return self.keyword


class WebhookSecretAuthenticationExtension(OpenApiAuthenticationExtension):
    target_class = 'generation_status.auth.WebhookSecretAuthentication'
    name = 'ApiKey'

    def get_security_definition(self, auto_schema):
        return {
            'type': 'apiKey',
            'name': 'X-Api-Key',
            'in': 'header',
            'description': 'Provide the shared webhook secret in X-Api-Key header',
        }
