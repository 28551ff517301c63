import logging
from dataclasses import dataclass
from django.conf import settings
from ..models import Pipeline

logger = logging.getLogger(__name__)

FIRST_FRAME = 'first_frame'
LAST_FRAME = 'last_frame'
SCRIPT = 'script'
VOICE = 'voice'
FINAL_VIDEO = 'final_video'

# stage -> (output slot, completion flag); final_video has no flag
STAGE_FIELDS = {
    FIRST_FRAME: ('first_frame_output', 'first_frame_complete'),
    LAST_FRAME: ('last_frame_output', 'last_frame_complete'),
    SCRIPT: ('script_output', 'script_complete'),
    VOICE: ('voice_output', 'voice_complete'),
    FINAL_VIDEO: ('final_video_output', None),
}

TERMINAL_STAGE = FINAL_VIDEO

STAGE_ALIASES = {
    'first_frame': FIRST_FRAME,
    'first': FIRST_FRAME,
    'frame': FIRST_FRAME,
    'last_frame': LAST_FRAME,
    'last': LAST_FRAME,
    'script': SCRIPT,
    'voice': VOICE,
    'speech': VOICE,
    'audio': VOICE,
    'final_video': FINAL_VIDEO,
    'video': FINAL_VIDEO,
    'lip_sync': FINAL_VIDEO,
    'talking_head': FINAL_VIDEO,
    'animate': FINAL_VIDEO,
}

FRAME_TYPES = {
    'first': FIRST_FRAME,
    'last': LAST_FRAME,
}


def canonical_stage(value):
    if not isinstance(value, str):
        return None
    return STAGE_ALIASES.get(value.strip().lower())


@dataclass(frozen=True)
class StageTarget:
    pipeline_id: str
    stage: str


def resolve_stage_target(file_id, metadata=None, output_url=None):
    """
    Work out which pipeline stage a file update should also be written to.

    The pipeline id comes from metadata['pipeline_id'] and falls back to the
    file id, since some callers use one id for both records. The stage comes
    from metadata['stage'], then metadata['frame_type']. With neither, and an
    output URL present, the first frame is assumed while the pipeline still
    lacks one. Returns a StageTarget or None when there is no association.
    """
    metadata = metadata if isinstance(metadata, dict) else {}
    pipeline_id = metadata.get('pipeline_id') or file_id
    if not pipeline_id:
        return None
    pipeline_id = str(pipeline_id)

    raw_stage = metadata.get('stage')
    if raw_stage:
        stage = canonical_stage(raw_stage)
        if stage is None:
            logger.warning('Unknown stage %r in metadata for file %s', raw_stage, file_id)
            return None
        return StageTarget(pipeline_id, stage)

    frame_type = metadata.get('frame_type')
    if isinstance(frame_type, str) and frame_type.strip().lower() in FRAME_TYPES:
        return StageTarget(pipeline_id, FRAME_TYPES[frame_type.strip().lower()])

    if not output_url or not settings.WEBHOOK_INFER_STAGE:
        return None

    flags = (
        Pipeline.objects.filter(pk=pipeline_id)
        .values('first_frame_complete')
        .first()
    )
    if flags is None:
        return None
    if not flags['first_frame_complete']:
        logger.info('No stage given for file %s; assuming first_frame of pipeline %s', file_id, pipeline_id)
        return StageTarget(pipeline_id, FIRST_FRAME)
    return None
