import contextlib
import logging
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from drf_spectacular.utils import (
    extend_schema,
    OpenApiResponse,
    OpenApiExample,
    OpenApiParameter,
)
from drf_spectacular.types import OpenApiTypes
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
import redis
from .models import ContentFile, GenerationStatus, Pipeline
from .serializers import (
    ContentFileSerializer,
    ContentStatusUpdateSerializer,
    DirectPipelineUpdateSerializer,
    PipelineSerializer,
    PipelineStageUpdateSerializer,
    classify_payload,
)
from .services.content import apply_content_update, sync_pipeline_from_content
from .services.credits import refund_description
from .services.pipelines import apply_stage_update
from .services.stages import canonical_stage
from .tasks import dispatch_refund
from .throttling import WebhookRateThrottle

logger = logging.getLogger(__name__)


def write_scope():
    if settings.WEBHOOK_ATOMIC_UPDATES:
        return transaction.atomic()
    return contextlib.nullcontext()


def maybe_refund(payload, status_value, subject):
    if status_value != GenerationStatus.FAILED:
        return
    if payload.get('user_id') and payload.get('credits_cost'):
        logger.info('Refunding %s credits to %s for %s', payload['credits_cost'], payload['user_id'], subject)
        dispatch_refund(
            payload['user_id'],
            payload['credits_cost'],
            refund_description(subject, payload.get('error_message')),
        )


class WebhookViewSet(viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    throttle_classes = [WebhookRateThrottle]
    serializer_class = ContentStatusUpdateSerializer

    @extend_schema(
        tags=['Webhooks'],
        summary='Report generation status',
        description=(
            'Unified callback for generation jobs. A type starting with "pipeline_" updates that '
            'pipeline stage directly; any other type updates a file record and mirrors the result '
            'into the pipeline named by its metadata.'
        ),
        request=ContentStatusUpdateSerializer,
        responses={
            200: OpenApiResponse(description='Update applied'),
            400: OpenApiResponse(description='Validation error'),
            401: OpenApiResponse(description='Unauthorized'),
            429: OpenApiResponse(description='Rate limit exceeded'),
            500: OpenApiResponse(description='Persistence failure'),
        },
        operation_id='webhook_update_status',
        examples=[
            OpenApiExample(
                'File completed',
                value={
                    "file_id": "f1",
                    "status": "completed",
                    "progress": 100,
                    "download_url": "https://cdn.example.com/renders/f1.mp4",
                    "metadata": {"pipeline_id": "p1", "stage": "final_video"},
                },
            ),
            OpenApiExample(
                'Pipeline voice stage completed',
                value={
                    "type": "pipeline_voice",
                    "pipeline_id": "p1",
                    "status": "completed",
                    "output": {"url": "https://cdn.example.com/audio/p1.mp3", "duration_seconds": 12},
                },
            ),
        ],
    )
    @action(detail=False, methods=['post'], url_path='update-status')
    def update_status(self, request):
        if not isinstance(request.data, dict):
            raise ValidationError('Expected a JSON object.')
        if classify_payload(request.data) == 'pipeline':
            return self._update_pipeline_stage(request.data)
        return self._update_content(request.data)

    def _update_content(self, data):
        serializer = ContentStatusUpdateSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data
        logger.info('File status update: %s -> %s', payload['file_id'], payload['status'])
        with write_scope():
            content = apply_content_update(payload)
            sync_pipeline_from_content(payload, content)
        maybe_refund(
            payload,
            payload.get('generation_status') or payload['status'],
            f"file {payload['file_id']}",
        )
        return Response({
            'success': True,
            'file_id': payload['file_id'],
            'status': payload['status'],
        })

    def _update_pipeline_stage(self, data):
        serializer = PipelineStageUpdateSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data
        output = payload.get('output') or {}
        logger.info('Pipeline stage update: %s %s -> %s', payload['pipeline_id'], payload['stage'], payload['status'])
        with write_scope():
            apply_stage_update(
                payload['pipeline_id'],
                payload['stage'],
                payload['status'],
                url=output.get('url'),
                duration_seconds=output.get('duration_seconds'),
                text=output.get('text'),
                progress=payload.get('progress'),
            )
        maybe_refund(payload, payload['status'], f"pipeline {payload['pipeline_id']} {payload['stage']}")
        return Response({
            'success': True,
            'pipeline_id': payload['pipeline_id'],
            'stage': payload['stage'],
            'status': payload['status'],
        })

    @extend_schema(
        tags=['Webhooks'],
        summary='Report pipeline stage status (legacy)',
        description='Older pipeline callback with a flat body. Not rate limited.',
        request=DirectPipelineUpdateSerializer,
        responses={
            200: OpenApiResponse(description='Update applied'),
            400: OpenApiResponse(description='Validation error'),
            401: OpenApiResponse(description='Unauthorized'),
        },
        operation_id='webhook_update_pipeline_status',
        examples=[
            OpenApiExample(
                'First frame ready',
                value={
                    "pipeline_id": "p1",
                    "stage": "first_frame",
                    "status": "completed",
                    "output_url": "https://cdn.example.com/frames/p1.png",
                },
            ),
        ],
    )
    @action(detail=False, methods=['post'], url_path='update-pipeline-status', throttle_classes=[])
    def update_pipeline_status(self, request):
        serializer = DirectPipelineUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data
        stage = None
        if payload.get('stage'):
            stage = canonical_stage(payload['stage'])
            if stage is None:
                raise ValidationError({'stage': [f"Unknown stage {payload['stage']!r}."]})
        logger.info('Legacy pipeline update: %s %s -> %s', payload['pipeline_id'], stage, payload['status'])
        apply_stage_update(
            payload['pipeline_id'],
            stage,
            payload['status'],
            url=payload.get('output_url') or None,
            duration_seconds=payload.get('duration_seconds'),
            text=payload.get('script_text'),
            progress=payload.get('progress'),
            output_data=payload.get('output_data'),
        )
        maybe_refund(payload, payload['status'], f"pipeline {payload['pipeline_id']} {stage or 'unknown stage'}")
        return Response({'success': True, 'pipeline_id': payload['pipeline_id']})

    @extend_schema(
        tags=['Webhooks'],
        summary='Get file status',
        operation_id='webhook_file_status',
        parameters=[
            OpenApiParameter(
                name='file_id',
                type=OpenApiTypes.STR,
                location=OpenApiParameter.PATH,
                description='File id',
                required=True,
            ),
        ],
        responses={
            200: ContentFileSerializer,
            404: OpenApiResponse(description='File not found'),
        },
    )
    @action(detail=False, methods=['get'], url_path='files/(?P<file_id>[^/]+)')
    def file_status(self, request, file_id=None):
        try:
            content = ContentFile.objects.get(pk=file_id)
        except ContentFile.DoesNotExist:
            return Response({'success': False, 'error': 'File not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ContentFileSerializer(content).data)

    @extend_schema(
        tags=['Webhooks'],
        summary='Get pipeline status',
        operation_id='webhook_pipeline_status',
        parameters=[
            OpenApiParameter(
                name='pipeline_id',
                type=OpenApiTypes.STR,
                location=OpenApiParameter.PATH,
                description='Pipeline id',
                required=True,
            ),
        ],
        responses={
            200: PipelineSerializer,
            404: OpenApiResponse(description='Pipeline not found'),
        },
    )
    @action(detail=False, methods=['get'], url_path='pipelines/(?P<pipeline_id>[^/]+)')
    def pipeline_status(self, request, pipeline_id=None):
        try:
            pipeline = Pipeline.objects.get(pk=pipeline_id)
        except Pipeline.DoesNotExist:
            return Response({'success': False, 'error': 'Pipeline not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(PipelineSerializer(pipeline).data)

    @extend_schema(
        tags=['System'],
        summary='Health check',
        operation_id='system_health',
        responses={
            200: OpenApiResponse(description='Health status'),
        },
    )
    @action(detail=False, methods=['get'], throttle_classes=[])
    def health(self, request):
        db_status = 'connected'
        try:
            ContentFile.objects.exists()
        except Exception:
            logger.exception('Health check: database unreachable')
            db_status = 'error'
        try:
            r = redis.Redis.from_url(settings.CELERY_BROKER_URL)
            redis_status = 'connected' if r.ping() else 'error'
        except redis.RedisError:
            redis_status = 'error'
        return Response({
            'status': 'healthy' if db_status == 'connected' else 'degraded',
            'timestamp': timezone.now(),
            'database': db_status,
            'redis': redis_status,
        })
