from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import LoginEvent, User


@admin.register(User)
class AppUserAdmin(UserAdmin):
    list_display = ("uid", "email", "display_name", "provider", "role", "last_login_at")
    search_fields = ("uid", "email", "display_name")
    fieldsets = UserAdmin.fieldsets + (
        ("Identity", {"fields": ("uid", "display_name", "photo_url", "provider", "role")}),
    )


@admin.register(LoginEvent)
class LoginEventAdmin(admin.ModelAdmin):
    list_display = ("user", "login_at", "provider", "ip")
    list_select_related = ("user",)
