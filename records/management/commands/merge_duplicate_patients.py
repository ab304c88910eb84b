import json
from pathlib import Path

from django.core.management.base import BaseCommand

from records.services.duplicates import merge_duplicate_patients


class Command(BaseCommand):
    help = "Merge patients sharing a document number into the oldest record."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Only report what would change.")
        parser.add_argument("--report", help="Write the patched/failed items to this JSON file.")

    def handle(self, *args, **opts):
        report = merge_duplicate_patients(dry_run=opts["dry_run"])

        if opts["report"]:
            path = Path(opts["report"])
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(report.as_dict(), indent=2), encoding="utf-8")
            self.stdout.write(f"Report written to {path}")

        self.stdout.write("Summary of actions performed:")
        self.stdout.write(f"Found {report.duplicates} duplicate patient(s).")
        for name, items in report.patched.items():
            self.stdout.write(f"{'Would patch' if opts['dry_run'] else 'Patched'} {len(items)} {name}.")
        self.stdout.write(f"Removed {report.removed} patient(s).")
        if report.failed:
            self.stdout.write(self.style.ERROR(f"Failed merges: {len(report.failed)}"))
        else:
            self.stdout.write(self.style.SUCCESS("Done."))
