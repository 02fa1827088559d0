from django import forms

from .validation import (
    validate_forgot_password,
    validate_login_register,
    validate_reset_password,
)


class ValidatedForm(forms.Form):
    """
    Runs one of the ``accounts.validation`` functions over the raw values.

    Fields are all ``required=False`` so the validation function is the
    single source of field messages.
    """

    validator = None
    validated_fields = ()

    def clean(self):
        cleaned = super().clean()
        values = [cleaned.get(name, "") for name in self.validated_fields]
        for error in type(self).validator(*values):
            self.add_error(error.field, error.message)
        return cleaned


# ==============================================================
# 🔐 Login or Register (single form)
# ==============================================================
class LoginRegisterForm(ValidatedForm):
    validator = validate_login_register
    validated_fields = ("identifier", "password")

    identifier = forms.CharField(
        label="Username / Email",
        required=False,
        widget=forms.TextInput(
            attrs={
                "placeholder": "Username or email",
                "autocomplete": "username",
            }
        ),
    )
    password = forms.CharField(
        label="Password",
        required=False,
        strip=False,
        widget=forms.PasswordInput(attrs={"autocomplete": "current-password"}),
    )


class ForgotPasswordForm(ValidatedForm):
    validator = validate_forgot_password
    validated_fields = ("identifier",)

    identifier = forms.CharField(
        label="Username / Email",
        required=False,
        widget=forms.TextInput(attrs={"placeholder": "Username or email"}),
    )


class ResetPasswordForm(ValidatedForm):
    validator = validate_reset_password
    validated_fields = ("identifier", "code", "password", "confirm_password")

    identifier = forms.CharField(
        label="Username / Email",
        required=False,
        widget=forms.TextInput(attrs={"placeholder": "Username or email"}),
    )
    code = forms.CharField(required=False, widget=forms.HiddenInput)
    password = forms.CharField(
        label="New password",
        required=False,
        strip=False,
        widget=forms.PasswordInput(attrs={"autocomplete": "new-password"}),
    )
    confirm_password = forms.CharField(
        label="Confirm password",
        required=False,
        strip=False,
        widget=forms.PasswordInput(attrs={"autocomplete": "new-password"}),
    )
