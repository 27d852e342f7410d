from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import LoginEvent, User
from accounts.services import upsert_user


class Command(BaseCommand):
    help = "Load demo learner accounts (and a demo admin) with zeroed study stats"

    def add_arguments(self, parser):
        parser.add_argument(
            "--users", type=int, default=5, help="Number of demo learners to create"
        )
        parser.add_argument(
            "--flush", action="store_true", help="Delete every existing user first"
        )
        parser.add_argument(
            "--no-admin", action="store_true", help="Do not create the demo admin account"
        )

    def handle(self, *args, **options):
        with transaction.atomic():
            if options["flush"]:
                User.objects.all().delete()
                self.stdout.write(self.style.SUCCESS("All existing user data has been deleted"))

            if not options["no_admin"]:
                admin, _ = upsert_user("demo-admin", "admin@example.com", display_name="Admin")
                admin.role = "admin"
                admin.is_staff = True
                admin.is_superuser = True
                admin.save(update_fields=["role", "is_staff", "is_superuser"])

            # Existing demo accounts keep their stats; only the profile is refreshed
            for i in range(1, options["users"] + 1):
                upsert_user(
                    f"demo-user-{i}",
                    f"learner{i}@example.com",
                    display_name=f"Learner {i}",
                )

        self.stdout.write(
            self.style.SUCCESS(
                f"Demo data loaded: {User.objects.count()} users, "
                f"{LoginEvent.objects.count()} login events"
            )
        )
