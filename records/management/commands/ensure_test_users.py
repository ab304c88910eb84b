from django.conf import settings
from django.core.management.base import BaseCommand

from records.models import User
from records.services.roles import ensure_roles

TEST_SET = [
    ("admin1", "admin"),
    ("medic1", "medic"),
    ("reception1", "receptionist"),
]


class Command(BaseCommand):
    help = "Ensure development users exist with DEFAULT_USER_PASSWORD (idempotent)."

    def handle(self, *args, **opts):
        roles = {role.id: role for role in ensure_roles()}
        for username, role_id in TEST_SET:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"role": roles[role_id], "is_active": True},
            )
            # reset password, role and active flag on every run
            user.set_password(settings.DEFAULT_USER_PASSWORD)
            user.role = roles[role_id]
            user.is_active = True
            user.is_staff = role_id == "admin"
            user.save()
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: {username} ({role_id})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
