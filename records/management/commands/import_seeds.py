from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from records.seeds.importers import SKIPPED_DIR, import_seeds


class Command(BaseCommand):
    help = "Load the *.seed.json files into the database."

    def add_arguments(self, parser):
        parser.add_argument("--seeds-dir", default=str(settings.SEEDS_DIR))
        parser.add_argument("--reset-passwords", action="store_true",
                            help="Give every imported user DEFAULT_USER_PASSWORD.")
        parser.add_argument("--keep-existing", action="store_true",
                            help="Do not wipe the domain tables first.")

    def handle(self, *args, **opts):
        self.stdout.write("=== Import Seeds ===")
        if opts["reset_passwords"]:
            self.stdout.write("  --reset-passwords: all user passwords will be reset")
        try:
            outcomes = import_seeds(
                opts["seeds_dir"],
                reset_passwords=opts["reset_passwords"],
                keep_existing=opts["keep_existing"],
                default_password=settings.DEFAULT_USER_PASSWORD,
            )
        except FileNotFoundError as exc:
            raise CommandError(f"Missing seed file: {exc.filename}") from exc

        self.stdout.write("=== Import Summary ===")
        for outcome in outcomes:
            self.stdout.write(outcome.line())
            if outcome.skipped:
                self.stdout.write(f"    wrote {len(outcome.skipped)} skipped items to "
                                  f"{SKIPPED_DIR}/{outcome.label.lower()}.json")
        self.stdout.write(self.style.SUCCESS("Import completed!"))
