import pytest
from django.core.cache import caches
from rest_framework.test import APIClient

SECRET = 'test-webhook-secret'
ROTATED_SECRET = 'next-webhook-secret'


@pytest.fixture(autouse=True)
def webhook_settings(settings):
    settings.WEBHOOK_SECRETS = [SECRET, ROTATED_SECRET]
    settings.WEBHOOK_RATE_LIMIT = 100
    settings.WEBHOOK_RATE_WINDOW = 60
    settings.WEBHOOK_INFER_STAGE = True
    settings.WEBHOOK_ATOMIC_UPDATES = False
    settings.RUN_TASK_INLINE = True
    caches[settings.WEBHOOK_THROTTLE_CACHE].clear()
    return settings


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def api_client():
    client = APIClient()
    client.credentials(HTTP_X_API_KEY=SECRET)
    return client


@pytest.fixture
def status_url():
    return '/api/webhooks/update-status/'


@pytest.fixture
def pipeline_status_url():
    return '/api/webhooks/update-pipeline-status/'
