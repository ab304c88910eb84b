import logging
from typing import Any, Dict, List, Optional

from django.contrib.auth import get_user_model

from records.models import AuditEvent

User = get_user_model()

logger = logging.getLogger(__name__)


def client_ip(request) -> Optional[str]:
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def log_action(*, user: Optional[User], action: str, object_type: Optional[str] = None,
               object_id: Optional[str] = None, detail: Optional[Dict[str, Any]] = None) -> AuditEvent:
    """Append one row to the audit trail.

    Anonymous callers (failed logins) are stored with a null user; the
    attempted username belongs in ``detail``.
    """
    event = AuditEvent.objects.create(
        user=user if isinstance(user, User) else None,
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )
    logger.debug('audit %s %s:%s by %s', action, object_type, object_id, getattr(event.user, 'username', '-'))
    return event


def log_login(request, *, user: Optional[User], result: str, username: Optional[str] = None) -> AuditEvent:
    detail = {'result': result, 'ip': client_ip(request)}
    if username is not None:
        detail['username'] = username
    if result != 'ok':
        logger.info('login %s for %s from %s', result, username or getattr(user, 'username', '?'), detail['ip'])
    return log_action(user=user, action='login', object_type='user',
                      object_id=user.id if user is not None else None, detail=detail)


def history(object_type: str, object_id) -> List[AuditEvent]:
    """Audit rows for one object, newest first."""
    return list(
        AuditEvent.objects.filter(object_type=object_type, object_id=str(object_id))
        .select_related('user')
        .order_by('-created_at', '-id')
    )
