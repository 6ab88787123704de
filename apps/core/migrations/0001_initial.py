# Generated migration for the generic document table

import apps.core.models
import django.core.serializers.json
import django.utils.timezone
from django.db import migrations, models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Document',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('collection', models.CharField(db_index=True, help_text='Collection name, e.g. articles or events', max_length=64, verbose_name='Collection')),
                ('doc_id', models.CharField(default=apps.core.models.generate_doc_id, help_text='Identifier of the document within its collection', max_length=64, verbose_name='Document ID')),
                ('data', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder, help_text='Document fields', verbose_name='Data')),
            ],
            options={
                'verbose_name': 'Document',
                'verbose_name_plural': 'Documents',
                'db_table': 'documents',
                'ordering': ['collection', 'created_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='document',
            constraint=models.UniqueConstraint(fields=('collection', 'doc_id'), name='unique_document_per_collection'),
        ),
    ]
