# Generated manually for the cashier session model

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CashierSession',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('opened_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('business_date', models.DateField()),
                ('opening_balance', models.DecimalField(decimal_places=2, max_digits=12, validators=[MinValueValidator(Decimal('0.00'))])),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('closing_cash', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('closing_non_cash', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('closing_notes', models.TextField(blank=True)),
                ('total_transactions', models.PositiveIntegerField(default=0)),
                ('total_revenue', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_cash', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_non_cash', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('expected_cash', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('expected_non_cash', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('variance_cash', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('variance_non_cash', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('variance_total', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('product_summary', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('closed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='closed_cashier_sessions', to=settings.AUTH_USER_MODEL)),
                ('opened_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='cashier_sessions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'cashier_sessions',
                'ordering': ['-opened_at'],
                'indexes': [models.Index(fields=['business_date'], name='cashier_sessions_date_idx')],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('closed_at__isnull', True)), fields=('opened_by',), name='unique_open_session_per_operator'),
                    models.UniqueConstraint(fields=('opened_by', 'business_date'), name='unique_session_per_operator_day'),
                ],
            },
        ),
    ]
