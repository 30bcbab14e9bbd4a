from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('cashier', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='cashiersession',
            name='close_preview_at',
            field=models.DateTimeField(blank=True, null=True),
        ),
    ]
