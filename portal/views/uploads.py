"""
Admin image upload.

The endpoint authenticates on its own instead of through DRF so that
every failure keeps the ``{"success": false, "error": ...}`` shape the
admin screens expect.  Validation problems are 400s, storage problems
500s, and a caller without an admin credential gets a 401.
"""
from __future__ import annotations

import logging

from rest_framework.decorators import api_view, authentication_classes, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status

from portal import session
from portal.authentication import authenticate_credential
from portal.roles import Role
from portal.services.audit import try_log_action
from portal.services.uploads import UploadIOError, UploadKind, UploadValidationError, store_upload

logger = logging.getLogger(__name__)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@parser_classes([MultiPartParser, FormParser])
def upload_view(request):
    credential = authenticate_credential(request, required_role=Role.ADMIN)
    if credential is None:
        logger.info("upload rejected: no admin credential")
        return Response({'success': False, 'error': 'Unauthorized - Admin access required'},
                        status=status.HTTP_401_UNAUTHORIZED)

    try:
        kind = UploadKind.parse(request.data.get('type'))
        stored = store_upload(request.FILES.get('file'), kind)
    except UploadValidationError as e:
        return Response({'success': False, 'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except UploadIOError as e:
        logger.exception("upload write failed")
        return Response({'success': False, 'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    try_log_action(user=None, action='upload', object_type='file', object_id=stored.name,
                   detail={'by': credential.subject_id, 'kind': stored.kind.value, 'size': stored.size},
                   ip=session.client_ip(request))
    return Response({
        'success': True,
        'data': {
            'url': stored.url,
            'originalName': stored.original_name,
            'type': stored.content_type,
            'size': stored.size,
        },
    })
