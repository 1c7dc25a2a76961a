"""
Server-rendered entry points.

Only the login page lives here: it is where the session gate sends
rejected page requests, and it explains why the visitor has to sign in
again.
"""
from django.shortcuts import render
from django.views.decorators.http import require_GET

from portal.middleware import IP_CHANGED, MSG_EXPIRED, MSG_IP_CHANGED


@require_GET
def login_page(request):
    notice = None
    if request.GET.get('reason') == IP_CHANGED:
        notice = MSG_IP_CHANGED
    elif request.GET.get('expired') == 'true':
        notice = MSG_EXPIRED
    return render(request, 'portal/login.html', {'notice': notice})
