from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='NotificationLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('request_id', models.BigIntegerField(db_index=True)),
                ('event_type', models.CharField(choices=[('ticket_issued', 'Ticket Issued')], max_length=32)),
                ('channel', models.CharField(choices=[('sms', 'SMS')], default='sms', max_length=16)),
                ('phone_number', models.CharField(blank=True, max_length=20)),
                ('message', models.CharField(blank=True, max_length=160)),
                ('sent_at', models.DateTimeField(auto_now_add=True)),
                ('success', models.BooleanField(default=False)),
                ('provider_id', models.CharField(blank=True, max_length=200, null=True)),
                ('details', models.TextField(blank=True, null=True)),
            ],
            options={
                'ordering': ['-sent_at'],
                'unique_together': {('request_id', 'event_type')},
            },
        ),
    ]
