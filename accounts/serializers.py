from rest_framework import serializers

from studystats.api.serializers import StudyStatsSerializer
from studystats.data.repos import get_stats
from .models import LoginEvent, User


class LoginEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoginEvent
        fields = ("login_at", "provider", "ip")


class UserSerializer(serializers.ModelSerializer):
    study_stats = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            "uid",
            "email",
            "display_name",
            "photo_url",
            "provider",
            "role",
            "study_stats",
            "last_login_at",
            "date_joined",
            "updated_at",
        )

    def get_study_stats(self, obj):
        return StudyStatsSerializer(get_stats(obj)).data


class UserUpsertSerializer(serializers.Serializer):
    uid = serializers.CharField(max_length=128)
    email = serializers.EmailField()
    display_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    photo_url = serializers.URLField(required=False, allow_blank=True, allow_null=True, default="")
    provider_data = serializers.ListField(
        child=serializers.DictField(), required=False, default=list
    )
