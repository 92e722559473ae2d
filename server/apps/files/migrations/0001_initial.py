import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='File',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('file_type', models.CharField(choices=[('folder', 'Folder'), ('file', 'File'), ('image', 'Image')], max_length=16)),
                ('is_public', models.BooleanField(default=False)),
                ('local_path', models.CharField(blank=True, default='', help_text='Path of the content on disk, empty for folders', max_length=1024)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('parent', models.ForeignKey(blank=True, help_text='Containing folder, NULL for the root', limit_choices_to={'file_type': 'folder'}, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='children', to='files.file')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to='users.user')),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['created_at', 'id'],
                'indexes': [models.Index(fields=['user', 'parent', 'created_at', 'id'], name='files_user_parent_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(models.Q(('file_type', 'folder'), _negated=True), ('local_path', ''), _connector='OR'), name='files_folder_without_content')],
            },
        ),
    ]
