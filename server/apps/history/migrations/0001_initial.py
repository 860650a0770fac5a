import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='HistoricExecution',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('process_definition_key', models.CharField(max_length=255)),
                ('space', models.CharField(blank=True, default='', max_length=255)),
                ('started_at', models.DateTimeField(db_index=True)),
                ('ended_at', models.DateTimeField(blank=True, help_text='Empty while the execution is still running', null=True)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='history.historicexecution')),
            ],
            options={
                'verbose_name': 'Historic execution',
                'verbose_name_plural': 'Historic executions',
            },
        ),
    ]
