from django.http import JsonResponse

from accounts.models import User

import structlog

logger = structlog.get_logger()


# Tokens are verified by the identity provider in front of this service;
# only the resulting uid reaches us.
class IdentityHeaderMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.identity_user = None
        if request.path.startswith("/api"):
            uid = request.headers.get("X-User-UID")
            if uid:
                try:
                    request.identity_user = User.objects.get(uid=uid, is_active=True)
                except User.DoesNotExist:
                    logger.info("identity_rejected", uid=uid)
                    return JsonResponse(
                        {"error": "User not found or invalid credentials."}, status=401
                    )
        response = self.get_response(request)
        return response
