from django.core.management.base import BaseCommand

from studystats.services.sessions import reset_stale_streaks


class Command(BaseCommand):
    help = "Reset streaks of users who did not study yesterday (run daily)"

    def handle(self, *args, **options):
        updated = reset_stale_streaks()
        self.stdout.write(self.style.SUCCESS(f"{updated} users had their streaks reset"))
