import logging
from django.utils import timezone
from ..models import GenerationStatus, Pipeline
from .stages import SCRIPT, STAGE_FIELDS, TERMINAL_STAGE

logger = logging.getLogger(__name__)

# keys that change on every write and are ignored when deciding whether a write is needed
VOLATILE_OUTPUT_KEYS = {'generated_at'}


def build_stage_output(stage, url=None, duration_seconds=None, text=None, extra=None):
    output = dict(extra or {})
    if stage == SCRIPT:
        text = text if text is not None else output.get('text', '')
        output['text'] = text
        output['char_count'] = len(text)
    else:
        output['url'] = url
        if duration_seconds is not None:
            output['duration_seconds'] = duration_seconds
    output['generated_at'] = timezone.now().isoformat()
    return output


def _same_output(current, new):
    if not isinstance(current, dict):
        return False
    keys = (current.keys() | new.keys()) - VOLATILE_OUTPUT_KEYS
    return all(current.get(k) == new.get(k) for k in keys)


def plan_stage_update(pipeline, stage, status, url=None, duration_seconds=None, text=None,
                      progress=None, output_data=None):
    slot, flag = STAGE_FIELDS.get(stage, (None, None))
    changes = {}

    if status == GenerationStatus.COMPLETED:
        output = build_stage_output(stage, url, duration_seconds, text, output_data)
        if not _same_output(getattr(pipeline, slot), output):
            changes[slot] = output
        if flag and not getattr(pipeline, flag):
            changes[flag] = True
        if stage == TERMINAL_STAGE:
            changes['status'] = 'completed'
            changes['progress'] = 100
        else:
            changes['status'] = 'draft'
    elif status == GenerationStatus.FAILED:
        changes['status'] = 'failed'
        changes['progress'] = 0
    elif status == GenerationStatus.PROCESSING:
        if progress is not None:
            changes['progress'] = progress

    return {
        field: value for field, value in changes.items()
        if field == slot or getattr(pipeline, field) != value
    }


def apply_stage_update(pipeline_id, stage, status, url=None, duration_seconds=None, text=None,
                       progress=None, output_data=None):
    """
    Reflect one stage notification into the pipeline record.

    Read-modify-write without a lock: concurrent notifications for different
    stages of the same pipeline can overwrite each other's status or progress.
    Returns the list of changed fields, or None when the pipeline does not exist.
    """
    pipeline = Pipeline.objects.filter(pk=pipeline_id).first()
    if pipeline is None:
        logger.info('No pipeline %s for %s stage update; skipping', pipeline_id, stage)
        return None

    changes = plan_stage_update(
        pipeline, stage, status,
        url=url, duration_seconds=duration_seconds, text=text,
        progress=progress, output_data=output_data,
    )
    if not changes:
        logger.info('Pipeline %s already reflects %s %s; no write', pipeline_id, stage, status)
        return []

    for field, value in changes.items():
        setattr(pipeline, field, value)
    pipeline.save(update_fields=[*changes, 'updated_at'])
    logger.info('Pipeline %s updated for %s %s: %s', pipeline_id, stage, status, sorted(changes))
    return sorted(changes)
