from django.dispatch import Signal, receiver

from .emails import send_email_confirmation
from .identity import DjangoIdentityService

# Sent with ``request`` and ``user`` after the login/register form creates an account.
account_registered = Signal()


@receiver(account_registered)
def send_confirmation_on_register(sender, request, user, **kwargs):
    """Accounts registered without an email have nothing to confirm."""
    if not user.email:
        return
    send_email_confirmation(DjangoIdentityService(request), user, request=request)
