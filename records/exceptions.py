import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class NotAuthenticatedWithReason(APIException):
    """401 carrying a machine readable ``reason`` (e.g. ``2fa_required``)."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid login'
    default_code = 'not_authenticated'

    def __init__(self, detail=None, reason=None):
        super().__init__(detail)
        self.reason = reason


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("unhandled error in %s", context.get('view').__class__.__name__, exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    error = {'code': 'api_error', 'message': detail}
    reason = getattr(exc, 'reason', None)
    if reason:
        error['reason'] = reason
    out = Response({'ok': False, 'error': error}, status=resp.status_code)
    for header in ('WWW-Authenticate', 'Retry-After'):
        if header in resp:
            out[header] = resp[header]
    return out
