from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    """
    Application user keyed by the identity provider's uid.
    Passwords are never checked here; sign-in happens at the provider.
    """

    PROVIDER_CHOICES = [("google", "google"), ("email", "email")]
    ROLE_CHOICES = [("user", "user"), ("admin", "admin")]

    uid = models.CharField(max_length=128, unique=True)
    display_name = models.CharField(max_length=150, blank=True)
    photo_url = models.URLField(max_length=500, blank=True)
    provider = models.CharField(max_length=16, choices=PROVIDER_CHOICES, default="email")
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default="user")
    last_login_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(default=timezone.now)


class LoginEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="login_history")
    login_at = models.DateTimeField(default=timezone.now)
    provider = models.CharField(max_length=16)
    ip = models.CharField(max_length=64, default="unknown")

    class Meta:
        ordering = ["-login_at", "-id"]
