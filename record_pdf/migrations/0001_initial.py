import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='PdfTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('entity_type', models.CharField(help_text='Model label of printable records, e.g. crm.Contact.', max_length=100)),
                ('body', models.TextField(blank=True, default='')),
                ('header', models.TextField(blank=True, default='')),
                ('footer', models.TextField(blank=True, default='')),
                ('print_header', models.BooleanField(default=False)),
                ('print_footer', models.BooleanField(default=False)),
                ('header_position', models.FloatField(default=0)),
                ('footer_position', models.FloatField(default=15)),
                ('page_orientation', models.CharField(choices=[('Portrait', 'Portrait'), ('Landscape', 'Landscape')], default='Portrait', max_length=20)),
                ('page_format', models.CharField(choices=[('A3', 'A3'), ('A4', 'A4'), ('A5', 'A5'), ('A6', 'A6'), ('A7', 'A7'), ('Letter', 'Letter'), ('Legal', 'Legal'), ('Custom', 'Custom')], default='A4', max_length=20)),
                ('page_width', models.FloatField(blank=True, null=True)),
                ('page_height', models.FloatField(blank=True, null=True)),
                ('left_margin', models.FloatField(default=10)),
                ('top_margin', models.FloatField(default=10)),
                ('right_margin', models.FloatField(default=10)),
                ('bottom_margin', models.FloatField(default=20)),
                ('font_face', models.CharField(blank=True, default='', max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'PDF Template',
                'verbose_name_plural': 'PDF Templates',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Attachment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('mime_type', models.CharField(default='application/pdf', max_length=100)),
                ('related_type', models.CharField(blank=True, max_length=100, null=True)),
                ('related_id', models.CharField(blank=True, max_length=64, null=True)),
                ('role', models.CharField(blank=True, choices=[('Mail Merge', 'Mail Merge'), ('Mass Pdf', 'Mass Pdf')], max_length=30, null=True)),
                ('contents', models.BinaryField()),
                ('size', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Attachment',
                'verbose_name_plural': 'Attachments',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ScheduledJob',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('handler', models.CharField(max_length=200)),
                ('data', models.JSONField(blank=True, default=dict)),
                ('execute_time', models.DateTimeField(db_index=True)),
                ('queue', models.CharField(default='default', max_length=100)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('RUNNING', 'Running'), ('SUCCESS', 'Success'), ('FAILED', 'Failed')], default='PENDING', max_length=20)),
                ('attempts', models.PositiveSmallIntegerField(default=0)),
                ('error', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'Scheduled Job',
                'verbose_name_plural': 'Scheduled Jobs',
                'ordering': ['execute_time'],
            },
        ),
    ]
