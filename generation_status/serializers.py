from urllib.parse import urlsplit
from rest_framework import serializers
from .models import ContentFile, GenerationStatus, Pipeline
from .services.stages import FINAL_VIDEO, SCRIPT, VOICE, canonical_stage

PIPELINE_TYPE_PREFIX = 'pipeline_'

CONTENT_TYPES = {
    'file', 'frame', 'first_frame', 'last_frame', 'speech', 'voice', 'script',
    'lip_sync', 'talking_head', 'animate', 'video', 'clip',
}

STATUS_VALUES = GenerationStatus.values


def classify_payload(data):
    """Return 'pipeline' for pipeline_<stage> type tags, 'content' for everything else."""
    kind = data.get('type') if isinstance(data, dict) else None
    if isinstance(kind, str) and kind.startswith(PIPELINE_TYPE_PREFIX):
        return 'pipeline'
    return 'content'


class HttpURLField(serializers.CharField):
    # Storage hosts are not always dotted names, so only scheme and host are checked.
    default_error_messages = {'invalid': 'Enter a valid http(s) URL.'}

    def __init__(self, **kwargs):
        kwargs.setdefault('max_length', 2048)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        parts = urlsplit(value)
        if parts.scheme.lower() not in ('http', 'https') or not parts.netloc or any(c.isspace() for c in value):
            self.fail('invalid')
        return value


class CreditFieldsMixin(serializers.Serializer):
    user_id = serializers.CharField(max_length=64, required=False, allow_null=True)
    credits_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )

    def validate_credits_cost(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError('credits_cost must be greater than 0.')
        return value


class ContentStatusUpdateSerializer(CreditFieldsMixin):
    type = serializers.CharField(max_length=64, required=False)
    file_id = serializers.CharField(max_length=255)
    status = serializers.ChoiceField(choices=STATUS_VALUES)
    generation_status = serializers.ChoiceField(choices=STATUS_VALUES, required=False)
    progress = serializers.IntegerField(min_value=0, max_value=100, required=False, allow_null=True)
    preview_url = HttpURLField(required=False, allow_null=True)
    download_url = HttpURLField(required=False, allow_null=True)
    audio_url = HttpURLField(required=False, allow_null=True)
    script_output = serializers.CharField(max_length=100000, required=False, allow_null=True, trim_whitespace=False)
    error_message = serializers.CharField(max_length=2000, required=False, allow_null=True, allow_blank=True)
    metadata = serializers.DictField(required=False, allow_null=True)
    # flat fields sent by the older speech and animate callbacks
    pipeline_id = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)
    audio_duration = serializers.FloatField(min_value=0, required=False, allow_null=True)
    video_url = HttpURLField(required=False, allow_null=True)

    def validate_type(self, value):
        if value not in CONTENT_TYPES:
            raise serializers.ValidationError(
                f'Unsupported type {value!r}. Allowed: {sorted(CONTENT_TYPES)} or pipeline_<stage>.'
            )
        return value

    def validate(self, attrs):
        pipeline_id = attrs.pop('pipeline_id', None)
        audio_duration = attrs.pop('audio_duration', None)
        video_url = attrs.pop('video_url', None)

        if video_url:
            for field in ('download_url', 'preview_url'):
                if not attrs.get(field):
                    attrs[field] = video_url

        metadata = dict(attrs.get('metadata') or {})
        if pipeline_id:
            metadata.setdefault('pipeline_id', pipeline_id)
        if audio_duration is not None:
            metadata.setdefault('duration_seconds', audio_duration)
        if not metadata.get('stage') and not metadata.get('frame_type'):
            kind = attrs.get('type')
            if pipeline_id and kind in ('speech', 'voice'):
                metadata['stage'] = VOICE
            elif video_url and kind == 'animate':
                metadata['stage'] = FINAL_VIDEO
        if metadata:
            attrs['metadata'] = metadata
        return attrs


class StageOutputSerializer(serializers.Serializer):
    url = HttpURLField(required=False)
    duration_seconds = serializers.FloatField(min_value=0, required=False, allow_null=True)
    text = serializers.CharField(max_length=100000, required=False, trim_whitespace=False)


class PipelineStageUpdateSerializer(CreditFieldsMixin):
    type = serializers.CharField(max_length=64)
    pipeline_id = serializers.CharField(max_length=255)
    status = serializers.ChoiceField(choices=STATUS_VALUES, required=False)
    output = StageOutputSerializer(required=False, allow_null=True)
    progress = serializers.IntegerField(min_value=0, max_value=100, required=False, allow_null=True)
    error_message = serializers.CharField(max_length=2000, required=False, allow_null=True, allow_blank=True)

    def validate_type(self, value):
        stage = canonical_stage(value[len(PIPELINE_TYPE_PREFIX):]) if value.startswith(PIPELINE_TYPE_PREFIX) else None
        if stage is None:
            raise serializers.ValidationError(f'Unknown pipeline stage type {value!r}.')
        return value

    def validate(self, attrs):
        attrs['stage'] = canonical_stage(attrs['type'][len(PIPELINE_TYPE_PREFIX):])
        output = attrs.get('output') or {}
        if not attrs.get('status'):
            attrs['status'] = GenerationStatus.COMPLETED if output else GenerationStatus.PROCESSING
        if attrs['status'] == GenerationStatus.COMPLETED:
            if attrs['stage'] == SCRIPT and not output.get('text'):
                raise serializers.ValidationError({'output': 'output.text is required to complete the script stage.'})
            if attrs['stage'] != SCRIPT and not output.get('url'):
                raise serializers.ValidationError({'output': 'output.url is required to complete a stage.'})
        return attrs


class DirectPipelineUpdateSerializer(CreditFieldsMixin):
    """Loose shape accepted by the older pipeline callback."""

    pipeline_id = serializers.CharField(max_length=255)
    status = serializers.ChoiceField(choices=STATUS_VALUES, default=GenerationStatus.COMPLETED)
    stage = serializers.CharField(max_length=64, required=False, allow_blank=True)
    output_url = serializers.CharField(max_length=2048, required=False, allow_null=True, allow_blank=True)
    script_text = serializers.CharField(max_length=100000, required=False, allow_null=True, trim_whitespace=False)
    output_data = serializers.DictField(required=False, allow_null=True)
    duration_seconds = serializers.FloatField(required=False, allow_null=True)
    progress = serializers.IntegerField(required=False, allow_null=True)
    error_message = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    def validate(self, attrs):
        if attrs['status'] == GenerationStatus.COMPLETED and not attrs.get('stage'):
            raise serializers.ValidationError({'stage': 'stage is required when status is completed.'})
        return attrs


class ContentFileSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContentFile
        fields = [
            'id', 'name', 'file_type', 'status', 'generation_status', 'progress',
            'preview_url', 'download_url', 'script_output', 'audio_url',
            'error_message', 'metadata', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PipelineSerializer(serializers.ModelSerializer):
    class Meta:
        model = Pipeline
        fields = [
            'id', 'name', 'pipeline_type', 'status', 'progress', 'current_stage',
            'first_frame_complete', 'last_frame_complete', 'script_complete', 'voice_complete',
            'first_frame_output', 'last_frame_output', 'script_output', 'voice_output',
            'final_video_output', 'created_at', 'updated_at',
        ]
        read_only_fields = fields
