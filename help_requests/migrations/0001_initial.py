import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ServiceRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[('food', 'Food'), ('general', 'General'), ('emergency', 'Emergency')], max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('ticket_issued', 'Ticket issued'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('visit_date', models.DateField(blank=True, null=True)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('normal', 'Normal'), ('high', 'High'), ('urgent', 'Urgent')], default='normal', max_length=10)),
                ('ticket_number', models.CharField(blank=True, max_length=32, null=True, unique=True)),
                ('ticket_code', models.CharField(blank=True, max_length=128)),
                ('ticket_issued_at', models.DateTimeField(blank=True, null=True)),
                ('contact_phone', models.CharField(blank=True, max_length=20)),
                ('submitted_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('requester', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='help_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['submitted_at', 'id'],
                'indexes': [models.Index(fields=['visit_date', 'category', 'status', 'submitted_at'], name='help_req_slot_idx')],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status__in', ('pending', 'approved', 'ticket_issued'))), fields=('requester', 'visit_date', 'category'), name='unique_active_request_per_slot'),
                    models.CheckConstraint(condition=models.Q(models.Q(('status__in', ('pending', 'approved', 'rejected')), ('ticket_number__isnull', True)), models.Q(('status__in', ('ticket_issued', 'completed')), ('ticket_number__isnull', False)), ('status', 'cancelled'), _connector='OR'), name='ticket_number_matches_status'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TicketSequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('visit_date', models.DateField()),
                ('category', models.CharField(choices=[('food', 'Food'), ('general', 'General'), ('emergency', 'Emergency')], max_length=20)),
                ('last_sequence', models.IntegerField(default=0)),
            ],
            options={
                'unique_together': {('visit_date', 'category')},
            },
        ),
    ]
