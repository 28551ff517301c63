import pytest
from generation_status.models import ContentFile, Pipeline
from generation_status.services.stages import StageTarget, canonical_stage, resolve_stage_target

pytestmark = pytest.mark.django_db

URL = 'https://cdn.example.com/out.png'


@pytest.mark.parametrize('value, stage', [
    ('first_frame', 'first_frame'),
    ('First', 'first_frame'),
    ('last', 'last_frame'),
    ('speech', 'voice'),
    ('lip_sync', 'final_video'),
    ('animate', 'final_video'),
    ('script', 'script'),
    ('thumbnail', None),
    (None, None),
])
def test_canonical_stage(value, stage):
    assert canonical_stage(value) == stage


def test_explicit_pipeline_and_stage():
    target = resolve_stage_target('f1', {'pipeline_id': 'p1', 'stage': 'voice'}, URL)
    assert target == StageTarget('p1', 'voice')


def test_file_id_is_the_fallback_pipeline_id():
    assert resolve_stage_target('f1', {'stage': 'final_video'}) == StageTarget('f1', 'final_video')


def test_frame_type_maps_to_stage():
    assert resolve_stage_target('f1', {'pipeline_id': 'p1', 'frame_type': 'last'}) == StageTarget('p1', 'last_frame')
    assert resolve_stage_target('f1', {'pipeline_id': 'p1', 'frame_type': 'first'}) == StageTarget('p1', 'first_frame')


def test_stage_wins_over_frame_type():
    target = resolve_stage_target('f1', {'pipeline_id': 'p1', 'stage': 'voice', 'frame_type': 'first'})
    assert target.stage == 'voice'


def test_unknown_stage_means_no_association():
    assert resolve_stage_target('f1', {'pipeline_id': 'p1', 'stage': 'thumbnail'}, URL) is None


def test_no_signal_and_no_url_means_no_association():
    Pipeline.objects.create(id='p1')
    assert resolve_stage_target('f1', {'pipeline_id': 'p1'}) is None


def test_no_signal_guesses_first_frame_while_incomplete():
    Pipeline.objects.create(id='p1')
    assert resolve_stage_target('f1', {'pipeline_id': 'p1'}, URL) == StageTarget('p1', 'first_frame')


def test_no_signal_and_first_frame_done_means_no_association():
    Pipeline.objects.create(id='p1', first_frame_complete=True)
    assert resolve_stage_target('f1', {'pipeline_id': 'p1'}, URL) is None


def test_no_signal_and_no_pipeline_means_no_association():
    assert resolve_stage_target('f1', {}, URL) is None


def test_inference_can_be_disabled(settings):
    settings.WEBHOOK_INFER_STAGE = False
    Pipeline.objects.create(id='p1')
    assert resolve_stage_target('f1', {'pipeline_id': 'p1'}, URL) is None


def test_guessed_first_frame_is_written_through_the_endpoint(api_client, status_url):
    Pipeline.objects.create(id='f-guess', name='b-roll')
    ContentFile.objects.create(id='f-guess', name='frame')
    api_client.post(status_url, {
        'file_id': 'f-guess', 'status': 'completed', 'preview_url': URL,
    }, format='json')

    pipeline = Pipeline.objects.get(pk='f-guess')
    assert pipeline.first_frame_complete is True
    assert pipeline.first_frame_output['url'] == URL


def test_stored_metadata_is_used_when_notification_has_none(api_client, status_url):
    Pipeline.objects.create(id='p-stored', name='talking head')
    ContentFile.objects.create(id='f-stored', name='frame', metadata={'pipeline_id': 'p-stored', 'frame_type': 'last'})
    api_client.post(status_url, {
        'file_id': 'f-stored', 'status': 'completed', 'download_url': URL,
    }, format='json')

    pipeline = Pipeline.objects.get(pk='p-stored')
    assert pipeline.last_frame_complete is True
    assert pipeline.first_frame_complete is False
