from django.contrib.auth.tokens import PasswordResetTokenGenerator


class EmailConfirmationTokenGenerator(PasswordResetTokenGenerator):
    """
    Tokens for the confirm-email link.

    The hash covers the confirmation flag and the address itself, so a code
    stops working once the email is confirmed or changed.
    """

    key_salt = "accounts.tokens.EmailConfirmationTokenGenerator"

    def _make_hash_value(self, user, timestamp):
        profile = getattr(user, "account_profile", None)
        confirmed = profile.email_confirmed if profile is not None else False
        return f"{user.pk}{user.email}{confirmed}{timestamp}"


email_confirmation_token_generator = EmailConfirmationTokenGenerator()
