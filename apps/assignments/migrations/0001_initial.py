import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('hierarchy', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Assignment',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('shift_type', models.CharField(choices=[('day', 'Day'), ('night', 'Night'), ('rotating', 'Rotating')], default='day', max_length=20)),
                ('assignment_type', models.CharField(choices=[('permanent', 'Permanent'), ('temporary', 'Temporary'), ('relief', 'Relief')], default='permanent', max_length=20)),
                ('status', models.CharField(choices=[('active', 'Active'), ('ended', 'Ended'), ('transferred', 'Transferred')], db_index=True, default='active', max_length=20)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, null=True)),
                ('special_instructions', models.TextField(blank=True)),
                ('transfer_reason', models.TextField(blank=True)),
                ('assigned_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='assignments_made', to=settings.AUTH_USER_MODEL)),
                ('beat', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='assignments', to='hierarchy.beat')),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='assignments', to='hierarchy.location')),
                ('operator', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='assignments', to=settings.AUTH_USER_MODEL)),
                ('replaces', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='replaced_by', to='assignments.assignment')),
                ('supervisor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='assignments', to='hierarchy.supervisorrecord')),
            ],
            options={
                'ordering': ['-start_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['operator', 'status'], name='assignment_operator_idx'),
                    models.Index(fields=['beat', 'status'], name='assignment_beat_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'active')), fields=('operator',), name='one_active_assignment_per_operator'),
                ],
            },
        ),
    ]
