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
            name="StudyStats",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_study_time", models.PositiveIntegerField(default=0)),
                ("streak", models.PositiveIntegerField(default=0)),
                ("streak_start_date", models.DateField(blank=True, null=True)),
                ("last_study_date", models.DateTimeField(blank=True, null=True)),
                ("completed_tests", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="study_stats", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "study stats",
                "indexes": [models.Index(fields=["streak", "last_study_date"], name="studystats__streak_7c3e1a_idx")],
            },
        ),
        migrations.CreateModel(
            name="StudySession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("duration_minutes", models.PositiveIntegerField()),
                ("client_timestamp", models.DateTimeField(blank=True, null=True)),
                ("test_completed", models.BooleanField(default=False)),
                ("stats", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sessions", to="studystats.studystats")),
            ],
            options={
                "ordering": ["date", "id"],
                "indexes": [models.Index(fields=["stats", "date"], name="studystats__stats_i_4b2d9e_idx")],
            },
        ),
        migrations.CreateModel(
            name="PracticeResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("test_type", models.CharField(choices=[("part5", "part5"), ("part6", "part6"), ("part7", "part7"), ("full-test", "full-test")], max_length=16)),
                ("part", models.CharField(max_length=32)),
                ("test_set", models.PositiveIntegerField(blank=True, null=True)),
                ("score", models.PositiveIntegerField()),
                ("correct_answers", models.PositiveIntegerField()),
                ("total_questions", models.PositiveIntegerField()),
                ("time_spent", models.PositiveIntegerField(default=0)),
                ("completed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="practice_results", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-completed_at", "-id"],
                "indexes": [models.Index(fields=["user", "completed_at"], name="studystats__user_id_9a1f03_idx")],
            },
        ),
    ]
