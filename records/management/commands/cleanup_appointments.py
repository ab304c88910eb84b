from django.conf import settings
from django.core.management.base import BaseCommand

from records.services.appointments import cleanup_old_appointments


class Command(BaseCommand):
    help = "Delete appointments older than the retention window (run monthly)."

    def add_arguments(self, parser):
        parser.add_argument("--months", type=int, default=settings.APPOINTMENT_RETENTION_MONTHS)

    def handle(self, *args, **opts):
        deleted = cleanup_old_appointments(months=opts["months"])
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} appointment(s) older than {opts['months']} month(s)."))
