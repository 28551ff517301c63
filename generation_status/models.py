from django.db import models
import uuid


def new_id():
    return str(uuid.uuid4())


class GenerationStatus(models.TextChoices):
    PROCESSING = 'processing', 'processing'
    COMPLETED = 'completed', 'completed'
    FAILED = 'failed', 'failed'


class ContentFile(models.Model):
    """A single generation job's result: one frame, speech track, script or video."""

    id = models.CharField(primary_key=True, max_length=64, default=new_id, editable=False)
    project_id = models.CharField(max_length=64, blank=True, null=True)
    folder_id = models.CharField(max_length=64, blank=True, null=True)
    user_id = models.CharField(max_length=64, blank=True, null=True)
    name = models.CharField(max_length=500, default='Untitled')
    file_type = models.CharField(max_length=64, default='file')
    status = models.CharField(max_length=32, default='processing')
    generation_status = models.CharField(
        max_length=16, choices=GenerationStatus.choices, default=GenerationStatus.PROCESSING
    )
    progress = models.PositiveSmallIntegerField(blank=True, null=True)
    preview_url = models.URLField(blank=True, null=True, max_length=2048)
    download_url = models.URLField(blank=True, null=True, max_length=2048)
    script_output = models.TextField(blank=True, null=True)
    audio_url = models.URLField(blank=True, null=True, max_length=2048)
    error_message = models.TextField(blank=True, null=True)
    # Carries the pipeline association: pipeline_id, stage, frame_type, duration_seconds.
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'files'
        indexes = [
            models.Index(fields=['user_id', 'created_at'], name='files_user_id_4b1f9e_idx'),
            models.Index(fields=['generation_status'], name='files_generat_8c2d51_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.name} ({self.generation_status})'


class Pipeline(models.Model):
    STATUS_CHOICES = [
        ('draft', 'draft'),
        ('processing', 'processing'),
        ('completed', 'completed'),
        ('failed', 'failed'),
    ]
    TYPE_CHOICES = [
        ('lip_sync', 'lip_sync'),
        ('talking_head', 'talking_head'),
        ('clips', 'clips'),
        ('b_roll', 'b_roll'),
        ('motion_graphics', 'motion_graphics'),
    ]
    STAGE_CHOICES = [
        ('first_frame', 'first_frame'),
        ('last_frame', 'last_frame'),
        ('script', 'script'),
        ('voice', 'voice'),
        ('final_video', 'final_video'),
    ]
    id = models.CharField(primary_key=True, max_length=64, default=new_id, editable=False)
    project_id = models.CharField(max_length=64, blank=True, null=True)
    user_id = models.CharField(max_length=64, blank=True, null=True)
    name = models.CharField(max_length=500, default='Untitled')
    pipeline_type = models.CharField(max_length=32, choices=TYPE_CHOICES, default='lip_sync')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='draft')
    progress = models.IntegerField(default=0)
    current_stage = models.CharField(max_length=16, choices=STAGE_CHOICES, default='first_frame')
    first_frame_complete = models.BooleanField(default=False)
    last_frame_complete = models.BooleanField(default=False)
    script_complete = models.BooleanField(default=False)
    voice_complete = models.BooleanField(default=False)
    first_frame_output = models.JSONField(blank=True, null=True)
    last_frame_output = models.JSONField(blank=True, null=True)
    script_output = models.JSONField(blank=True, null=True)
    voice_output = models.JSONField(blank=True, null=True)
    final_video_output = models.JSONField(blank=True, null=True)
    output_file = models.ForeignKey(
        ContentFile, on_delete=models.SET_NULL, blank=True, null=True, related_name='pipelines'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pipelines'
        indexes = [
            models.Index(fields=['user_id', 'created_at'], name='pipelines_user_id_5e8a1c_idx'),
            models.Index(fields=['status'], name='pipelines_status_9d04b7_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.name} ({self.status})'


class CreditAccount(models.Model):
    user_id = models.CharField(max_length=64, unique=True)
    credits = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'profiles'


class CreditTransaction(models.Model):
    user_id = models.CharField(max_length=64)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    transaction_type = models.CharField(max_length=32)
    description = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'credit_transactions'
        indexes = [
            models.Index(fields=['user_id', 'created_at'], name='credit_tran_user_id_7a3e20_idx'),
        ]
        ordering = ['-created_at']
