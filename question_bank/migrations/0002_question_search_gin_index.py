from django.db import migrations


INDEX_NAME = 'question_search_tsv_gin'


def create_gin_index(apps, schema_editor):
    # GIN indexes only exist on PostgreSQL; other backends keep the plain table
    if schema_editor.connection.vendor != 'postgresql':
        return
    schema_editor.execute(
        f'CREATE INDEX IF NOT EXISTS {INDEX_NAME} '
        'ON question_bank_question_search USING gin (tsv)'
    )


def drop_gin_index(apps, schema_editor):
    if schema_editor.connection.vendor != 'postgresql':
        return
    schema_editor.execute(f'DROP INDEX IF EXISTS {INDEX_NAME}')


class Migration(migrations.Migration):

    dependencies = [
        ('question_bank', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_gin_index, drop_gin_index),
    ]
