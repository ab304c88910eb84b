from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from records.seeds.pipeline import create_seeds


class Command(BaseCommand):
    help = "Build *.seed.json files from the legacy document-store dumps."

    def add_arguments(self, parser):
        parser.add_argument("--dumps-dir", default=str(settings.DUMPS_DIR))
        parser.add_argument("--seeds-dir", default=str(settings.SEEDS_DIR))

    def handle(self, *args, **opts):
        self.stdout.write("=== Create Seeds ===")
        try:
            report = create_seeds(
                opts["dumps_dir"],
                opts["seeds_dir"],
                lab_owner_id=settings.LAB_OWNER_ID,
                default_password=settings.DEFAULT_USER_PASSWORD,
            )
        except FileNotFoundError as exc:
            raise CommandError(f"Missing dump file: {exc.filename}") from exc

        for line in report.lines():
            self.stdout.write(line)
        self.stdout.write(self.style.SUCCESS(f"Seed files written to {opts['seeds_dir']}"))
