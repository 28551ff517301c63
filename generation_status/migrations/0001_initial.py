from django.db import migrations, models
import django.db.models.deletion
import generation_status.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ContentFile',
            fields=[
                ('id', models.CharField(default=generation_status.models.new_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('project_id', models.CharField(blank=True, max_length=64, null=True)),
                ('folder_id', models.CharField(blank=True, max_length=64, null=True)),
                ('user_id', models.CharField(blank=True, max_length=64, null=True)),
                ('name', models.CharField(default='Untitled', max_length=500)),
                ('file_type', models.CharField(default='file', max_length=64)),
                ('status', models.CharField(default='processing', max_length=32)),
                ('generation_status', models.CharField(choices=[('processing', 'processing'), ('completed', 'completed'), ('failed', 'failed')], default='processing', max_length=16)),
                ('progress', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('preview_url', models.URLField(blank=True, max_length=2048, null=True)),
                ('download_url', models.URLField(blank=True, max_length=2048, null=True)),
                ('script_output', models.TextField(blank=True, null=True)),
                ('audio_url', models.URLField(blank=True, max_length=2048, null=True)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'files',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user_id', 'created_at'], name='files_user_id_4b1f9e_idx'),
                    models.Index(fields=['generation_status'], name='files_generat_8c2d51_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CreditAccount',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(max_length=64, unique=True)),
                ('credits', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'profiles',
            },
        ),
        migrations.CreateModel(
            name='CreditTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(max_length=64)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('transaction_type', models.CharField(max_length=32)),
                ('description', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'credit_transactions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user_id', 'created_at'], name='credit_tran_user_id_7a3e20_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Pipeline',
            fields=[
                ('id', models.CharField(default=generation_status.models.new_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('project_id', models.CharField(blank=True, max_length=64, null=True)),
                ('user_id', models.CharField(blank=True, max_length=64, null=True)),
                ('name', models.CharField(default='Untitled', max_length=500)),
                ('pipeline_type', models.CharField(choices=[('lip_sync', 'lip_sync'), ('talking_head', 'talking_head'), ('clips', 'clips'), ('b_roll', 'b_roll'), ('motion_graphics', 'motion_graphics')], default='lip_sync', max_length=32)),
                ('status', models.CharField(choices=[('draft', 'draft'), ('processing', 'processing'), ('completed', 'completed'), ('failed', 'failed')], default='draft', max_length=16)),
                ('progress', models.IntegerField(default=0)),
                ('current_stage', models.CharField(choices=[('first_frame', 'first_frame'), ('last_frame', 'last_frame'), ('script', 'script'), ('voice', 'voice'), ('final_video', 'final_video')], default='first_frame', max_length=16)),
                ('first_frame_complete', models.BooleanField(default=False)),
                ('last_frame_complete', models.BooleanField(default=False)),
                ('script_complete', models.BooleanField(default=False)),
                ('voice_complete', models.BooleanField(default=False)),
                ('first_frame_output', models.JSONField(blank=True, null=True)),
                ('last_frame_output', models.JSONField(blank=True, null=True)),
                ('script_output', models.JSONField(blank=True, null=True)),
                ('voice_output', models.JSONField(blank=True, null=True)),
                ('final_video_output', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('output_file', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pipelines', to='generation_status.contentfile')),
            ],
            options={
                'db_table': 'pipelines',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user_id', 'created_at'], name='pipelines_user_id_5e8a1c_idx'),
                    models.Index(fields=['status'], name='pipelines_status_9d04b7_idx'),
                ],
            },
        ),
    ]
