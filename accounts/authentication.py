from rest_framework.authentication import BaseAuthentication


class IdentityHeaderAuthentication(BaseAuthentication):
    """Expose the user resolved by IdentityHeaderMiddleware to DRF views."""

    def authenticate(self, request):
        user = getattr(request._request, "identity_user", None)
        if user is None:
            return None
        return (user, None)
