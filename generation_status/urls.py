from rest_framework.routers import DefaultRouter
from .views import WebhookViewSet

router = DefaultRouter()
router.register('webhooks', WebhookViewSet, basename='webhooks')

urlpatterns = router.urls
