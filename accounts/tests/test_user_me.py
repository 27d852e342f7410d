import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.services import upsert_user


@pytest.mark.django_db
class TestUserMeEndpoint:
    def setup_method(self):
        self.client = APIClient()
        self.url = reverse("user-me")
        self.test_uid = "firebase-uid-1"
        self.user, _ = upsert_user(self.test_uid, "testuser@example.com")

    def test_me_endpoint_with_identity_header(self):
        """Test that user can authenticate via X-User-UID header"""
        response = self.client.get(self.url, HTTP_X_USER_UID=self.test_uid)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"uid": self.test_uid}

    def test_me_endpoint_with_non_existent_user_header(self):
        """Test that non-existent uid in header returns 401"""
        response = self.client.get(self.url, HTTP_X_USER_UID="nonexistentuser")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_me_endpoint_without_authentication(self):
        """Test that unauthenticated request returns 401"""
        response = self.client.get(self.url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {"error": "User not authenticated"}
