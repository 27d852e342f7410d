from django.conf import settings
from django.db import transaction
from django.utils import timezone
import structlog

from studystats.data.models import StudyStats
from studystats.data.repos import storage_guard
from .models import LoginEvent, User

logger = structlog.get_logger()


def provider_from(provider_data):
    if provider_data and provider_data[0].get("providerId") == "google.com":
        return "google"
    return "email"


def upsert_user(uid, email, display_name="", photo_url="", provider_data=None, ip="unknown"):
    """
    Called on every sign-in. The first sign-in creates the user together
    with zeroed study stats; later ones refresh the profile.
    Returns (user, created).
    """
    provider = provider_from(provider_data)
    now = timezone.now()

    with storage_guard(), transaction.atomic():
        user = User.objects.select_for_update().filter(uid=uid).first()
        created = user is None
        if created:
            user = User.objects.create(
                uid=uid,
                username=uid,
                email=email,
                display_name=display_name or "",
                photo_url=photo_url or "",
                provider=provider,
                role="admin" if settings.ADMIN_EMAIL and email == settings.ADMIN_EMAIL else "user",
                last_login_at=now,
                updated_at=now,
            )
            user.set_unusable_password()
            user.save(update_fields=["password"])
            StudyStats.objects.create(user=user)
        else:
            user.email = email
            user.display_name = display_name or ""
            user.photo_url = photo_url or ""
            user.provider = provider
            user.last_login_at = now
            user.updated_at = now
            user.save(update_fields=[
                "email", "display_name", "photo_url", "provider", "last_login_at", "updated_at",
            ])

        LoginEvent.objects.create(user=user, login_at=now, provider=provider, ip=ip)

    logger.info("user_signed_in", uid=uid, provider=provider, created=created, role=user.role)
    return user, created


def find_user(uid):
    with storage_guard():
        return User.objects.filter(uid=uid).first()
