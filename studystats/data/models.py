from django.conf import settings
from django.db import models
from django.utils import timezone

from ..domain.enums import PracticeType, Skill


class StudyStats(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="study_stats"
    )
    total_study_time = models.PositiveIntegerField(default=0)  # minutes
    streak = models.PositiveIntegerField(default=0)  # days
    streak_start_date = models.DateField(null=True, blank=True)
    last_study_date = models.DateTimeField(null=True, blank=True)  # UTC
    completed_tests = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name_plural = "study stats"
        indexes = [
            models.Index(fields=["streak", "last_study_date"], name="studystats__streak_7c3e1a_idx"),
        ]

    def __str__(self):
        return f"{self.user_id}: {self.total_study_time}m, streak {self.streak}"


class StudySession(models.Model):
    # Append-only history; totals live on StudyStats
    stats = models.ForeignKey(StudyStats, on_delete=models.CASCADE, related_name="sessions")
    date = models.DateTimeField(default=timezone.now)
    duration_minutes = models.PositiveIntegerField()
    client_timestamp = models.DateTimeField(null=True, blank=True)
    test_completed = models.BooleanField(default=False)

    class Meta:
        ordering = ["date", "id"]
        indexes = [
            models.Index(fields=["stats", "date"], name="studystats__stats_i_4b2d9e_idx"),
        ]


class PracticeResult(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="practice_results"
    )
    test_type = models.CharField(
        max_length=16, choices=[(t.value, t.value) for t in PracticeType]
    )
    part = models.CharField(max_length=32)
    test_set = models.PositiveIntegerField(null=True, blank=True)
    score = models.PositiveIntegerField()
    correct_answers = models.PositiveIntegerField()
    total_questions = models.PositiveIntegerField()
    time_spent = models.PositiveIntegerField(default=0)  # minutes
    completed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-completed_at", "-id"]
        indexes = [
            models.Index(fields=["user", "completed_at"], name="studystats__user_id_9a1f03_idx"),
        ]


class PracticeProgress(models.Model):
    """An unfinished practice test the learner can resume."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="practice_progress"
    )
    test_type = models.CharField(max_length=16, choices=[(s.value, s.value) for s in Skill])
    part = models.PositiveSmallIntegerField()
    test_set = models.PositiveIntegerField()
    current_question = models.PositiveIntegerField(default=0)
    total_questions = models.PositiveIntegerField()
    selected_answers = models.JSONField(default=dict, blank=True)  # question id -> option index
    time_spent = models.PositiveIntegerField(default=0)  # seconds
    current_passage = models.PositiveIntegerField(null=True, blank=True)  # parts 6 and 7
    completed = models.BooleanField(default=False)
    started_at = models.DateTimeField(default=timezone.now)
    last_saved = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name_plural = "practice progress"
        ordering = ["-last_saved", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "test_type", "part", "test_set"],
                name="studystats_progress_one_per_test",
            ),
        ]
