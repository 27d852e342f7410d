"""Read-only, allow-listed view of the stored collections for operators.

Only the collections and fields listed here can be read or filtered on;
credential fields are never exposed.
"""
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from studystats.data.models import PracticeProgress, PracticeResult, StudySession, StudyStats
from studystats.data.repos import storage_guard
from .models import LoginEvent, User

SAMPLE_SIZE = 10
MAX_LIMIT = 100


def _serializer_for(model, fields):
    meta = type("Meta", (), {"model": model, "fields": fields})
    return type(f"{model.__name__}InspectionSerializer", (serializers.ModelSerializer,), {"Meta": meta})


COLLECTIONS = {
    "users": (User, (
        "id", "uid", "email", "display_name", "provider", "role",
        "is_staff", "is_active", "last_login_at", "date_joined", "updated_at",
    )),
    "login_events": (LoginEvent, ("id", "user", "login_at", "provider", "ip")),
    "study_stats": (StudyStats, (
        "id", "user", "total_study_time", "streak", "streak_start_date",
        "last_study_date", "completed_tests", "updated_at",
    )),
    "study_sessions": (StudySession, (
        "id", "stats", "date", "duration_minutes", "client_timestamp", "test_completed",
    )),
    "practice_results": (PracticeResult, (
        "id", "user", "test_type", "part", "test_set", "score",
        "correct_answers", "total_questions", "time_spent", "completed_at",
    )),
    "test_progress": (PracticeProgress, (
        "id", "user", "test_type", "part", "test_set", "current_question",
        "total_questions", "time_spent", "current_passage", "completed",
        "started_at", "last_saved",
    )),
}

SERIALIZERS = {name: _serializer_for(model, fields) for name, (model, fields) in COLLECTIONS.items()}


class QueryInSerializer(serializers.Serializer):
    collection = serializers.ChoiceField(choices=sorted(COLLECTIONS))
    query = serializers.DictField(required=False, default=dict)
    limit = serializers.IntegerField(required=False, default=SAMPLE_SIZE)

    def validate_limit(self, value):
        return max(1, min(value, MAX_LIMIT))

    def validate(self, attrs):
        _, fields = COLLECTIONS[attrs["collection"]]
        for key, value in attrs["query"].items():
            if key not in fields:
                raise serializers.ValidationError({"query": f"cannot filter on '{key}'"})
            if isinstance(value, (dict, list)):
                raise serializers.ValidationError({"query": f"'{key}' must be a plain value"})
        return attrs


def overview():
    """Document count and the first few rows of every collection."""
    data = {}
    with storage_guard():
        for name, (model, _) in COLLECTIONS.items():
            qs = model.objects.order_by("pk")
            data[name] = {
                "total_documents": qs.count(),
                "sample_documents": SERIALIZERS[name](qs[:SAMPLE_SIZE], many=True).data,
            }
    return data


def run_query(collection, query, limit):
    model, _ = COLLECTIONS[collection]
    with storage_guard():
        try:
            qs = model.objects.filter(**query).order_by("pk")
            total = qs.count()
        except (DjangoValidationError, ValueError, TypeError) as exc:
            raise serializers.ValidationError({"query": str(exc)})
        documents = SERIALIZERS[collection](qs[:limit], many=True).data
    return total, documents
