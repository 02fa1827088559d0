from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.urls import reverse

logger = logging.getLogger(__name__)


def _absolute_url(request, path: str) -> str:
    if request is not None:
        return request.build_absolute_uri(path)
    return f"{settings.SITE_BASE_URL.rstrip('/')}{path}"


def _send(subject: str, template: str, context: dict, recipient: str, request=None) -> bool:
    html_message = render_to_string(f"emails/{template}.html", context, request=request)
    plain_message = render_to_string(f"emails/{template}.txt", context, request=request)
    try:
        send_mail(
            f"{settings.EMAIL_SUBJECT_PREFIX}{subject}",
            plain_message,
            settings.DEFAULT_FROM_EMAIL,
            [recipient],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as e:
        logger.warning(f"Failed to send '{template}' email to {recipient}: {e}")
        return False
    logger.info(f"Sent '{template}' email to {recipient}")
    return True


def send_email_confirmation(identity, user, request=None) -> bool:
    code = identity.generate_email_confirmation_token(user)
    query = urlencode({"userId": user.pk, "code": code})
    context = {
        "user": user,
        "confirm_url": _absolute_url(request, f"{reverse('accounts:confirm_email')}?{query}"),
    }
    return _send("Confirm your email", "confirm_email", context, user.email, request)


def send_password_reset(identity, user, request=None) -> bool:
    code = identity.generate_password_reset_token(user)
    query = urlencode({"code": code})
    context = {
        "user": user,
        "reset_url": _absolute_url(request, f"{reverse('accounts:reset_password')}?{query}"),
    }
    return _send("Reset your password", "reset_password", context, user.email, request)
