import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Location',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=150, unique=True)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='hierarchy_location_created', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Beat',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('beat_code', models.CharField(max_length=30, unique=True)),
                ('name', models.CharField(blank=True, max_length=150)),
                ('description', models.TextField(blank=True)),
                ('number_of_operators', models.PositiveIntegerField(default=1)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='hierarchy_beat_created', to=settings.AUTH_USER_MODEL)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='beats', to='hierarchy.location')),
            ],
            options={
                'ordering': ['beat_code'],
                'indexes': [models.Index(fields=['location', 'is_active'], name='beat_location_active_idx')],
            },
        ),
        migrations.CreateModel(
            name='SupervisorRecord',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('supervisor_type', models.CharField(choices=[('general_supervisor', 'General Supervisor'), ('supervisor', 'Supervisor')], db_index=True, max_length=30)),
                ('approval_status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20)),
                ('region_assigned', models.CharField(blank=True, max_length=150)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True)),
                ('decided_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('account', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='supervisor_record', to=settings.AUTH_USER_MODEL)),
                ('decided_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='decided_registrations', to=settings.AUTH_USER_MODEL)),
                ('general_supervisor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='supervisors', to='hierarchy.supervisorrecord')),
                ('location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='supervisors', to='hierarchy.location')),
                ('registered_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='submitted_registrations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['supervisor_type', 'approval_status'], name='supervisor_type_status_idx')],
            },
        ),
        migrations.AddConstraint(
            model_name='supervisorrecord',
            constraint=models.CheckConstraint(condition=models.Q(('supervisor_type', 'supervisor'), ('general_supervisor__isnull', True), _connector='OR'), name='general_supervisor_only_for_supervisors'),
        ),
        migrations.AddConstraint(
            model_name='supervisorrecord',
            constraint=models.CheckConstraint(condition=models.Q(('supervisor_type', 'supervisor'), ('location__isnull', True), _connector='OR'), name='location_only_for_supervisors'),
        ),
        migrations.AddConstraint(
            model_name='supervisorrecord',
            constraint=models.CheckConstraint(condition=models.Q(('supervisor_type', 'general_supervisor'), ('region_assigned', ''), _connector='OR'), name='region_only_for_general_supervisors'),
        ),
        migrations.AddConstraint(
            model_name='supervisorrecord',
            constraint=models.CheckConstraint(condition=models.Q(('approval_status', 'rejected'), ('rejection_reason', ''), _connector='OR'), name='rejection_reason_only_when_rejected'),
        ),
    ]
