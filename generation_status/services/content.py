import logging
from ..models import ContentFile, GenerationStatus
from .stages import VOICE, resolve_stage_target
from .pipelines import apply_stage_update

logger = logging.getLogger(__name__)

OUTPUT_FIELDS = ('preview_url', 'download_url', 'script_output', 'audio_url')

DEFAULT_ERROR_MESSAGE = 'Generation failed'


def content_changes(data):
    status = data['status']
    generation_status = data.get('generation_status') or status
    changes = {'status': status, 'generation_status': generation_status}

    if generation_status == GenerationStatus.COMPLETED:
        for field in OUTPUT_FIELDS:
            if data.get(field):
                changes[field] = data[field]
        changes['error_message'] = None
        progress = data.get('progress')
        changes['progress'] = 100 if progress is None else progress
    elif generation_status == GenerationStatus.FAILED:
        changes['error_message'] = data.get('error_message') or DEFAULT_ERROR_MESSAGE
        changes['preview_url'] = None
        changes['download_url'] = None
        changes['progress'] = 0
    elif data.get('progress') is not None:
        changes['progress'] = data['progress']
    return changes


def apply_content_update(data):
    file_id = data['file_id']
    content = ContentFile.objects.filter(pk=file_id).first()
    if content is None:
        logger.warning('No file %s for status update; continuing with pipeline sync', file_id)
        return None

    changes = content_changes(data)
    for field, value in changes.items():
        setattr(content, field, value)
    fields = list(changes)
    metadata = data.get('metadata')
    if metadata:
        content.metadata = {**(content.metadata or {}), **metadata}
        fields.append('metadata')
    content.save(update_fields=[*fields, 'updated_at'])
    logger.info('File %s updated to %s', file_id, changes['generation_status'])
    return content


def _output_url(data, stage):
    if stage == VOICE:
        return data.get('audio_url') or data.get('download_url') or data.get('preview_url')
    return data.get('download_url') or data.get('preview_url') or data.get('audio_url')


def sync_pipeline_from_content(data, content=None):
    # stored metadata already has the notification's metadata merged in
    if content is not None:
        metadata = content.metadata
    else:
        metadata = data.get('metadata')
    metadata = metadata or {}
    any_url = data.get('download_url') or data.get('preview_url') or data.get('audio_url')

    target = resolve_stage_target(data['file_id'], metadata, any_url)
    if target is None:
        logger.debug('File %s has no pipeline association', data['file_id'])
        return None, None

    status = data.get('generation_status') or data['status']
    changed = apply_stage_update(
        target.pipeline_id,
        target.stage,
        status,
        url=_output_url(data, target.stage),
        duration_seconds=metadata.get('duration_seconds'),
        text=data.get('script_output'),
        progress=data.get('progress'),
    )
    return target, changed
