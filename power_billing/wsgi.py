"""
WSGI config for power_billing project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "power_billing.settings")

application = get_wsgi_application()
