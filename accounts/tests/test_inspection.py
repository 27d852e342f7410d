import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.services import upsert_user
from studystats.data.models import StudyStats


@pytest.mark.django_db
class TestDataInspection:
    def setup_method(self):
        self.client = APIClient()
        self.url = reverse("data")
        self.admin, _ = upsert_user("ops-admin", "ops@example.com")
        self.admin.role = "admin"
        self.admin.save(update_fields=["role"])
        for i in range(3):
            upsert_user(f"learner-{i}", f"learner{i}@example.com")
        StudyStats.objects.filter(user__uid="learner-1").update(streak=4)

    def as_admin(self, method, payload=None):
        call = getattr(self.client, method)
        return call(self.url, payload, format="json", HTTP_X_USER_UID=self.admin.uid)

    def test_requires_admin(self):
        assert self.client.get(self.url).status_code == status.HTTP_403_FORBIDDEN
        learner = self.client.post(
            self.url, {"collection": "users"}, format="json", HTTP_X_USER_UID="learner-0"
        )
        assert learner.status_code == status.HTTP_403_FORBIDDEN

    def test_overview_counts_and_samples(self):
        data = self.as_admin("get").json()

        assert data["total_collections"] == 6
        assert "test_progress" in data["collections"]
        users = data["data"]["users"]
        assert users["total_documents"] == 4
        assert len(users["sample_documents"]) == 4
        assert "password" not in users["sample_documents"][0]
        assert data["data"]["study_stats"]["total_documents"] == 4

    def test_filtered_query(self):
        resp = self.as_admin("post", {"collection": "study_stats", "query": {"streak": 4}})

        assert resp.status_code == status.HTTP_200_OK
        body = resp.json()
        assert body["total_documents"] == 1
        assert body["documents"][0]["streak"] == 4

    def test_limit_is_clamped(self):
        body = self.as_admin("post", {"collection": "users", "limit": 0}).json()
        assert body["total_documents"] == 4
        assert len(body["documents"]) == 1

        body = self.as_admin("post", {"collection": "users", "limit": 5000}).json()
        assert len(body["documents"]) == 4

    @pytest.mark.parametrize("payload", [
        {"collection": "django_session"},
        {"collection": "users", "query": {"password": "x"}},
        {"collection": "users", "query": {"uid__startswith": "learner"}},
        {"collection": "users", "query": {"role": {"$ne": "admin"}}},
        {"collection": "study_stats", "query": {"streak": "many"}},
    ])
    def test_rejects_unlisted_collections_and_fields(self, payload):
        resp = self.as_admin("post", payload)
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
