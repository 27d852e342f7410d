from django.contrib import admin, messages

from .data.models import PracticeProgress, PracticeResult, StudySession, StudyStats
from .services.sessions import reset_study_stats


@admin.action(description="Reset study time and streak")
def reset_selected_stats(modeladmin, request, queryset):
    for stats in queryset.select_related("user"):
        reset_study_stats(stats.user.uid)
    modeladmin.message_user(request, f"{queryset.count()} stats reset", messages.SUCCESS)


@admin.register(StudyStats)
class StudyStatsAdmin(admin.ModelAdmin):
    list_display = ("user", "total_study_time", "streak", "streak_start_date", "last_study_date")
    readonly_fields = ("total_study_time", "streak", "streak_start_date", "last_study_date")
    actions = [reset_selected_stats]


@admin.register(StudySession)
class StudySessionAdmin(admin.ModelAdmin):
    list_display = ("stats", "date", "duration_minutes", "test_completed")


@admin.register(PracticeResult)
class PracticeResultAdmin(admin.ModelAdmin):
    list_display = ("user", "test_type", "part", "score", "completed_at")
    list_filter = ("test_type",)


@admin.register(PracticeProgress)
class PracticeProgressAdmin(admin.ModelAdmin):
    list_display = ("user", "test_type", "part", "test_set", "current_question", "completed", "last_saved")
    list_filter = ("test_type", "completed")
