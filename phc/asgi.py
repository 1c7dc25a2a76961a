"""
ASGI config for the PHC portal project.

Only plain HTTP is served; the session gate is synchronous and runs the
same way under either entry point.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "phc.settings")

application = get_asgi_application()
