"""
WSGI config for proof_of_concept project.

It exposes the WSGI callable as a module-level variable named ``application``.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "proof_of_concept.settings")

application = get_wsgi_application()
