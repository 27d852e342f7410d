from rest_framework import serializers

from ..data.models import PracticeProgress, PracticeResult, StudySession, StudyStats
from ..domain.enums import PracticeType, Skill
from ..utils.time import format_minutes


class SessionTimeInSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=128)
    session_time = serializers.IntegerField()  # minutes; < 1 is an InvalidSession
    timestamp = serializers.DateTimeField(required=False, allow_null=True)


class StudyStatsInSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=128)
    study_time = serializers.IntegerField()
    test_completed = serializers.BooleanField(required=False, default=False)


class StudySessionSerializer(serializers.ModelSerializer):
    class Meta:
        model = StudySession
        fields = ("date", "duration_minutes", "client_timestamp", "test_completed")


class StudyStatsSerializer(serializers.ModelSerializer):
    total_study_time_display = serializers.SerializerMethodField()

    class Meta:
        model = StudyStats
        fields = (
            "total_study_time",
            "total_study_time_display",
            "streak",
            "streak_start_date",
            "last_study_date",
            "completed_tests",
        )

    def get_total_study_time_display(self, obj) -> str:
        return format_minutes(obj.total_study_time)


class PracticeResultSerializer(serializers.ModelSerializer):
    test_type = serializers.ChoiceField(choices=[t.value for t in PracticeType])

    class Meta:
        model = PracticeResult
        fields = (
            "id",
            "test_type",
            "part",
            "test_set",
            "score",
            "correct_answers",
            "total_questions",
            "time_spent",
            "completed_at",
        )
        read_only_fields = ("id", "completed_at")

    def validate(self, attrs):
        if attrs["correct_answers"] > attrs["total_questions"]:
            raise serializers.ValidationError("correct_answers must be <= total_questions.")
        return attrs


class PracticeProgressSerializer(serializers.ModelSerializer):
    test_type = serializers.ChoiceField(choices=[s.value for s in Skill])

    class Meta:
        model = PracticeProgress
        fields = (
            "id",
            "test_type",
            "part",
            "test_set",
            "current_question",
            "total_questions",
            "selected_answers",
            "time_spent",
            "current_passage",
            "completed",
            "started_at",
            "last_saved",
        )
        read_only_fields = ("id", "last_saved")

    def validate_selected_answers(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("selected_answers must map question ids to answers.")
        for answer in value.values():
            if not isinstance(answer, int) or isinstance(answer, bool):
                raise serializers.ValidationError("answers must be option indexes.")
        return value

    def validate(self, attrs):
        if attrs.get("current_question", 0) > attrs["total_questions"]:
            raise serializers.ValidationError("current_question must be <= total_questions.")
        return attrs


class ProgressLookupSerializer(serializers.Serializer):
    test_type = serializers.ChoiceField(choices=[s.value for s in Skill])
    part = serializers.IntegerField(min_value=1)
    test_set = serializers.IntegerField(min_value=1)
