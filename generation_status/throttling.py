import time
from django.conf import settings
from django.core.cache import caches
from rest_framework.throttling import SimpleRateThrottle


def caller_ident(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        first = forwarded.split(',')[0].strip()
        if first:
            return first
    real_ip = request.META.get('HTTP_X_REAL_IP')
    if real_ip:
        return real_ip.strip()
    return request.META.get('REMOTE_ADDR') or 'unknown'


# History lives in the WEBHOOK_THROTTLE_CACHE alias; LocMem makes the limit per process.
class WebhookRateThrottle(SimpleRateThrottle):
    scope = 'webhook'

    def __init__(self):
        self.cache = caches[settings.WEBHOOK_THROTTLE_CACHE]
        super().__init__()

    def timer(self):
        return time.time()

    def get_rate(self):
        return f'{settings.WEBHOOK_RATE_LIMIT}/{settings.WEBHOOK_RATE_WINDOW}'

    def parse_rate(self, rate):
        num, window = rate.split('/')
        return int(num), int(window)

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': caller_ident(request)}
