import logging

from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("unhandled API error", exc_info=exc)
        return Response({'success': False, 'error': str(exc)}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'success': False, 'error': detail}, status=resp.status_code, headers=_auth_headers(resp))


def _auth_headers(resp):
    # keep WWW-Authenticate so 401s stay 401s for clients that care
    value = resp.get('WWW-Authenticate')
    return {'WWW-Authenticate': value} if value else None
