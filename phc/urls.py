"""
URL configuration for the PHC portal project.

The ``urlpatterns`` list routes URLs to views.  This module includes
the Django admin, the portal API routes and the uploaded-file mount.
OpenAPI documentation is exposed at ``/swagger/`` and ``/redoc/``.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

# API metadata for Swagger/OpenAPI documentation
api_info = openapi.Info(
    title="PHC Portal API",
    default_version='v1',
    description="Session and account services for the PHC healthcare portal.",
)

schema_view = get_schema_view(
    api_info,
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('portal.routers')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]

# Uploaded images are served from the upload directory in development;
# production deployments mount the same directory behind the web server.
urlpatterns += static(settings.PORTAL_UPLOAD_URL, document_root=settings.PORTAL_UPLOAD_ROOT)
