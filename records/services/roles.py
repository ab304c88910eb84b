from records.models import Role
from records.permissions import DEFAULT_ROLES


def ensure_roles(roles=None) -> list[Role]:
    """Create or update the built-in roles (idempotent)."""
    out = []
    for role_id, permissions in (roles or DEFAULT_ROLES).items():
        role, created = Role.objects.get_or_create(id=role_id, defaults={'permissions': list(permissions)})
        if not created and role.permissions != list(permissions):
            role.permissions = list(permissions)
            role.save(update_fields=['permissions'])
        out.append(role)
    return out
