from django.core.management.base import BaseCommand

from records.services.roles import ensure_roles


class Command(BaseCommand):
    help = "Create or update the built-in roles (idempotent)."

    def handle(self, *args, **opts):
        for role in ensure_roles():
            self.stdout.write(self.style.SUCCESS(f"ok: {role.id} ({len(role.permissions)} permissions)"))
