from unittest import mock
import pytest
from django.db import DatabaseError
from generation_status.models import ContentFile, Pipeline

pytestmark = pytest.mark.django_db


def test_completed_file_scenario(api_client, status_url):
    ContentFile.objects.create(id='f1', name='clip', error_message='old failure', progress=40)
    response = api_client.post(status_url, {
        'file_id': 'f1',
        'status': 'completed',
        'progress': 100,
        'download_url': 'https://x/y.mp4',
    }, format='json')

    assert response.status_code == 200
    assert response.json() == {'success': True, 'file_id': 'f1', 'status': 'completed'}
    content = ContentFile.objects.get(pk='f1')
    assert content.download_url == 'https://x/y.mp4'
    assert content.error_message is None
    assert content.generation_status == 'completed'
    assert content.progress == 100


def test_completed_without_progress_defaults_to_100_and_keeps_urls(api_client, status_url):
    ContentFile.objects.create(id='f2', name='frame')
    api_client.post(status_url, {
        'type': 'frame',
        'file_id': 'f2',
        'status': 'completed',
        'preview_url': 'https://cdn.example.com/p.png',
        'download_url': 'https://cdn.example.com/d.png',
        'script_output': 'Line one.\nLine two.',
        'audio_url': 'https://cdn.example.com/a.mp3',
    }, format='json')

    content = ContentFile.objects.get(pk='f2')
    assert content.progress == 100
    assert content.preview_url == 'https://cdn.example.com/p.png'
    assert content.download_url == 'https://cdn.example.com/d.png'
    assert content.script_output == 'Line one.\nLine two.'
    assert content.audio_url == 'https://cdn.example.com/a.mp3'


def test_explicit_progress_is_kept_on_completion(api_client, status_url):
    ContentFile.objects.create(id='f3', name='clip')
    api_client.post(status_url, {
        'file_id': 'f3', 'status': 'completed', 'progress': 95,
        'download_url': 'https://cdn.example.com/d.mp4',
    }, format='json')
    assert ContentFile.objects.get(pk='f3').progress == 95


def test_failed_sets_default_message_and_resets_progress(api_client, status_url):
    ContentFile.objects.create(
        id='f4', name='clip', progress=70,
        preview_url='https://cdn.example.com/p.png', download_url='https://cdn.example.com/d.mp4',
    )
    response = api_client.post(status_url, {'file_id': 'f4', 'status': 'failed'}, format='json')

    assert response.status_code == 200
    content = ContentFile.objects.get(pk='f4')
    assert content.generation_status == 'failed'
    assert content.error_message == 'Generation failed'
    assert content.progress == 0
    assert content.preview_url is None
    assert content.download_url is None


def test_failed_keeps_provided_message(api_client, status_url):
    ContentFile.objects.create(id='f5', name='clip')
    api_client.post(status_url, {
        'file_id': 'f5', 'status': 'failed', 'error_message': 'Provider timed out',
    }, format='json')
    assert ContentFile.objects.get(pk='f5').error_message == 'Provider timed out'


def test_processing_only_touches_progress(api_client, status_url):
    ContentFile.objects.create(id='f6', name='clip', preview_url='https://cdn.example.com/p.png')
    api_client.post(status_url, {'file_id': 'f6', 'status': 'processing', 'progress': 35}, format='json')

    content = ContentFile.objects.get(pk='f6')
    assert content.generation_status == 'processing'
    assert content.progress == 35
    assert content.preview_url == 'https://cdn.example.com/p.png'


def test_generation_status_overrides_status(api_client, status_url):
    ContentFile.objects.create(id='f7', name='speech')
    api_client.post(status_url, {
        'type': 'speech', 'file_id': 'f7', 'status': 'processing', 'generation_status': 'failed',
    }, format='json')
    content = ContentFile.objects.get(pk='f7')
    assert content.status == 'processing'
    assert content.generation_status == 'failed'
    assert content.progress == 0


def test_metadata_is_merged(api_client, status_url):
    ContentFile.objects.create(id='f8', name='clip', metadata={'prompt': 'sunset', 'pipeline_id': 'p8'})
    api_client.post(status_url, {
        'file_id': 'f8', 'status': 'processing', 'metadata': {'provider': 'kling'},
    }, format='json')
    assert ContentFile.objects.get(pk='f8').metadata == {
        'prompt': 'sunset', 'pipeline_id': 'p8', 'provider': 'kling',
    }


def test_validation_error_reports_issues_and_writes_nothing(api_client, status_url):
    ContentFile.objects.create(id='f9', name='clip')
    response = api_client.post(status_url, {
        'file_id': 'f9', 'status': 'completed', 'progress': 150, 'download_url': 'nope',
    }, format='json')

    assert response.status_code == 400
    body = response.json()
    assert body['success'] is False
    assert body['error'] == 'Invalid payload'
    assert {issue['field'] for issue in body['issues']} == {'progress', 'download_url'}
    assert ContentFile.objects.get(pk='f9').generation_status == 'processing'


def test_non_object_body_is_rejected(api_client, status_url):
    response = api_client.post(status_url, [1, 2], format='json')
    assert response.status_code == 400
    assert response.json()['success'] is False


def test_unknown_file_is_not_an_error(api_client, status_url):
    response = api_client.post(status_url, {
        'file_id': 'nope', 'status': 'completed', 'download_url': 'https://cdn.example.com/d.mp4',
    }, format='json')
    assert response.status_code == 200
    assert not ContentFile.objects.filter(pk='nope').exists()


def test_file_id_reused_as_pipeline_id(api_client, status_url):
    Pipeline.objects.create(id='shared-1', name='animate', first_frame_complete=True)
    response = api_client.post(status_url, {
        'type': 'animate',
        'file_id': 'shared-1',
        'status': 'completed',
        'download_url': 'https://cdn.example.com/final.mp4',
        'metadata': {'stage': 'animate'},
    }, format='json')

    assert response.status_code == 200
    pipeline = Pipeline.objects.get(pk='shared-1')
    assert pipeline.final_video_output['url'] == 'https://cdn.example.com/final.mp4'
    assert pipeline.status == 'completed'


def test_database_error_returns_500_and_skips_pipeline(api_client, status_url):
    ContentFile.objects.create(id='f10', name='frame')
    Pipeline.objects.create(id='p10', name='pipe')
    with mock.patch.object(ContentFile, 'save', side_effect=DatabaseError('connection lost')):
        response = api_client.post(status_url, {
            'file_id': 'f10',
            'status': 'completed',
            'download_url': 'https://cdn.example.com/frame.png',
            'metadata': {'pipeline_id': 'p10', 'stage': 'first_frame'},
        }, format='json')

    assert response.status_code == 500
    assert response.json()['success'] is False
    assert response.json()['details'] == 'connection lost'
    pipeline = Pipeline.objects.get(pk='p10')
    assert pipeline.first_frame_complete is False
    assert pipeline.first_frame_output is None


def test_file_status_lookup(api_client):
    ContentFile.objects.create(id='f11', name='clip', generation_status='completed', progress=100)
    response = api_client.get('/api/webhooks/files/f11/')
    assert response.status_code == 200
    assert response.json()['generation_status'] == 'completed'
    assert api_client.get('/api/webhooks/files/unknown/').status_code == 404


def test_stored_pipeline_association_survives_partial_metadata(api_client, status_url):
    Pipeline.objects.create(id='p-stored', name='voice ad')
    ContentFile.objects.create(
        id='f-stored', name='voice', file_type='speech',
        metadata={'pipeline_id': 'p-stored', 'stage': 'voice'},
    )
    response = api_client.post(status_url, {
        'file_id': 'f-stored',
        'status': 'completed',
        'audio_url': 'https://cdn.example.com/a.mp3',
        'metadata': {'duration_seconds': 9},
    }, format='json')

    assert response.status_code == 200
    pipeline = Pipeline.objects.get(pk='p-stored')
    assert pipeline.voice_complete is True
    assert pipeline.voice_output['url'] == 'https://cdn.example.com/a.mp3'
    assert pipeline.voice_output['duration_seconds'] == 9
    assert not Pipeline.objects.filter(pk='f-stored').exists()


def test_flat_speech_callback_updates_voice_stage(api_client, status_url):
    Pipeline.objects.create(id='p-speech', name='voice ad')
    ContentFile.objects.create(id='f-speech', name='voice', file_type='speech')
    response = api_client.post(status_url, {
        'type': 'speech',
        'file_id': 'f-speech',
        'pipeline_id': 'p-speech',
        'status': 'completed',
        'audio_url': 'https://cdn.example.com/s.mp3',
        'audio_duration': 11,
    }, format='json')

    assert response.status_code == 200
    pipeline = Pipeline.objects.get(pk='p-speech')
    assert pipeline.voice_complete is True
    assert pipeline.voice_output['duration_seconds'] == 11
    assert ContentFile.objects.get(pk='f-speech').metadata['pipeline_id'] == 'p-speech'


def test_flat_animate_callback_completes_pipeline(api_client, status_url):
    Pipeline.objects.create(id='anim-1', name='animate', first_frame_complete=True)
    ContentFile.objects.create(id='anim-1', name='animate', file_type='animate')
    response = api_client.post(status_url, {
        'type': 'animate',
        'file_id': 'anim-1',
        'status': 'completed',
        'video_url': 'https://cdn.example.com/anim.mp4',
    }, format='json')

    assert response.status_code == 200
    content = ContentFile.objects.get(pk='anim-1')
    assert content.download_url == 'https://cdn.example.com/anim.mp4'
    assert content.preview_url == 'https://cdn.example.com/anim.mp4'
    pipeline = Pipeline.objects.get(pk='anim-1')
    assert pipeline.final_video_output['url'] == 'https://cdn.example.com/anim.mp4'
    assert pipeline.status == 'completed'
    assert pipeline.progress == 100


def test_actor_type_is_rejected(api_client, status_url):
    response = api_client.post(status_url, {'type': 'actor', 'file_id': 'a1', 'status': 'completed'}, format='json')
    assert response.status_code == 400
    assert response.json()['issues'][0]['field'] == 'type'
