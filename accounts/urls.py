from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import (
    UserViewSet,
    data_inspection,
    initialize_data,
    test_connection,
    user_record,
)

router = SimpleRouter(trailing_slash=False)
router.register("users", UserViewSet, basename="user")

urlpatterns = [
    path("user", user_record, name="user-record"),
    path("test-connection", test_connection, name="test-connection"),
    path("seed", initialize_data, name="seed"),
    path("data", data_inspection, name="data"),
    path("", include(router.urls)),
]
