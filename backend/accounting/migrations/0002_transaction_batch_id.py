"""
Add Transaction.batch_id so transactions created together can be reported on as a batch.
"""
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("accounting", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="transaction",
            name="batch_id",
            field=models.CharField(
                blank=True,
                db_index=True,
                default="",
                help_text="Shared by every transaction created in one batch.",
                max_length=40,
            ),
        ),
    ]
