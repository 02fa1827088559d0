from django.conf import settings
from django.db import models


class AccountProfile(models.Model):
    """
    Per-account state the auth user model does not carry.

    Created lazily the first time an account needs it (registration or
    email confirmation), so accounts made outside the login/register flow
    (``createsuperuser``, admin) still work.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="account_profile",
    )
    email_confirmed = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["user__username"]
        verbose_name = "Account Profile"
        verbose_name_plural = "Account Profiles"

    def __str__(self) -> str:
        return f"AccountProfile<{self.user.username}> confirmed={self.email_confirmed}"
