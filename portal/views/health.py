from django.db import connections
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from portal.permissions import IsAdminRole


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def db_status(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return Response({'ok': True, 'db': bool(row and row[0] == 1)})
    except Exception as e:
        return Response({'ok': False, 'error': str(e)}, status=500)
