import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("studystats", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PracticeProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("test_type", models.CharField(choices=[("reading", "reading"), ("listening", "listening")], max_length=16)),
                ("part", models.PositiveSmallIntegerField()),
                ("test_set", models.PositiveIntegerField()),
                ("current_question", models.PositiveIntegerField(default=0)),
                ("total_questions", models.PositiveIntegerField()),
                ("selected_answers", models.JSONField(blank=True, default=dict)),
                ("time_spent", models.PositiveIntegerField(default=0)),
                ("current_passage", models.PositiveIntegerField(blank=True, null=True)),
                ("completed", models.BooleanField(default=False)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("last_saved", models.DateTimeField(default=django.utils.timezone.now)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="practice_progress", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "practice progress",
                "ordering": ["-last_saved", "-id"],
            },
        ),
        migrations.AddConstraint(
            model_name="practiceprogress",
            constraint=models.UniqueConstraint(fields=("user", "test_type", "part", "test_set"), name="studystats_progress_one_per_test"),
        ),
    ]
