"""
Role based permission strings.

A role carries a list of strings of the form:

``<service>:<method>``
    the method is allowed, scoped to the caller's own records on
    services that declare an owner field;
``<service>:<method>:all``
    the method is allowed on every record;
``<service>:<method>.<field>``
    the method is allowed but written data is limited to ``field``.

A user's permissions are the union of their primary role and any
additional roles.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from django.core.cache import cache
from rest_framework.exceptions import PermissionDenied

METHODS = ('find', 'get', 'create', 'patch', 'remove')
ROLE_CACHE_TTL = 300


def _all(service: str, methods=METHODS) -> list[str]:
    return [f'{service}:{m}:all' for m in methods]


def _base(service: str, methods=METHODS) -> list[str]:
    return [f'{service}:{m}' for m in methods]


DEFAULT_ROLES: dict[str, list[str]] = {
    'admin': (
        _all('patients') + _all('users') + _all('encounters', ('find', 'get', 'create'))
        + _all('appointments') + _all('studies') + _all('study-results', ('find',))
        + _all('time-off-events') + _all('md-settings', ('get', 'patch')) + _all('roles', ('find',))
        + _all('referring-doctors', ('find',))
    ),
    'medic': (
        _base('patients', ('find', 'get', 'create', 'patch'))
        + _base('encounters', ('find', 'get', 'create'))
        + _base('appointments')
        + _base('studies', ('find', 'get', 'create', 'patch'))
        + _base('study-results', ('find',))
        + _base('time-off-events')
        + _base('md-settings', ('get', 'patch'))
        + _base('users', ('get', 'patch'))
        + _base('referring-doctors', ('find',))
    ),
    'receptionist': (
        _base('patients', ('find', 'get', 'create', 'patch'))
        + _base('appointments')
        + _all('time-off-events', ('find', 'get'))
        + _all('md-settings', ('get',))
        + _all('users', ('find', 'get'))
        + _base('referring-doctors', ('find',))
    ),
    'lab-owner': (
        _base('patients', ('find', 'get', 'create', 'patch'))
        + _all('studies') + _all('study-results', ('find',))
        + _base('referring-doctors', ('find',))
    ),
}


def _cache_key(role_id: str) -> str:
    return f'role:permissions:{role_id}'


def invalidate_role_cache(role_id: str) -> None:
    cache.delete(_cache_key(role_id))


def role_permissions(role_id: str) -> list[str]:
    from .models import Role

    ck = _cache_key(role_id)
    cached = cache.get(ck)
    if cached is not None:
        return cached
    role = Role.objects.filter(id=role_id).first()
    perms = list(role.permissions or []) if role else []
    cache.set(ck, perms, ROLE_CACHE_TTL)
    return perms


def get_user_permissions(user) -> set[str]:
    role_ids = list(user.user_roles.values_list('role_id', flat=True))
    if user.role_id and user.role_id not in role_ids:
        role_ids.append(user.role_id)
    perms: set[str] = set()
    for role_id in role_ids:
        perms.update(role_permissions(role_id))
    return perms


@dataclass
class Grant:
    """Outcome of a permission check for one service method."""
    service: str
    method: str
    all: bool = False
    fields: list[str] = field(default_factory=list)

    def sanitize(self, data: dict) -> dict:
        """Drop written fields the caller may not touch."""
        if self.all or not self.fields:
            return dict(data)
        return {k: v for k, v in data.items() if k in self.fields}

    def scope(self, qs, user, owner_field: str | None):
        if self.all or not owner_field:
            return qs
        return qs.filter(**{owner_field: user.id})

    def check_owner(self, owner_id, user) -> None:
        if self.all:
            return
        if owner_id != user.id:
            raise PermissionDenied('You can only access your own records')


def authorize(user, service: str, method: str) -> Grant:
    perms = get_user_permissions(user)
    base = f'{service}:{method}'
    has_all = f'{base}:all' in perms
    fields = [p.split('.', 1)[1] for p in perms if p.startswith(f'{base}.')]
    if not has_all and base not in perms and not fields:
        raise PermissionDenied(f"You don't have permission to {method} on {service}")
    return Grant(service=service, method=method, all=has_all, fields=fields)
