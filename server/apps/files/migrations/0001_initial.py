from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='FileEntry',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('space', models.CharField(db_index=True, max_length=255)),
                ('namespace', models.CharField(blank=True, max_length=255, null=True)),
                ('name', models.CharField(help_text='Display name supplied by the uploader', max_length=255)),
                ('size', models.BigIntegerField(help_text='Content size in bytes')),
                ('digest', models.CharField(help_text='Hex digest of the content as uploaded', max_length=128)),
                ('digest_algorithm', models.CharField(max_length=32)),
                ('modified', models.DateTimeField(db_index=True)),
            ],
            options={
                'verbose_name': 'File entry',
                'verbose_name_plural': 'File entries',
                'db_table': settings.FILES_TABLE_NAME,
                'indexes': [models.Index(fields=['space', 'namespace'], name='files_space_namespace_idx')],
            },
        ),
    ]
