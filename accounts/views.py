from __future__ import annotations

import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods, require_POST

from .classifier import is_email
from .dispatch import login_or_register
from .emails import send_password_reset
from .forms import ForgotPasswordForm, LoginRegisterForm, ResetPasswordForm
from .identity import INVALID_TOKEN, DjangoIdentityService
from .signals import account_registered

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------
# 🧩 Helpers
# ----------------------------------------------------------------
def _redirect_to_local(request, next_url):
    """Redirect to ``next_url`` only when it points back at this site."""
    if next_url and url_has_allowed_host_and_scheme(
        next_url,
        allowed_hosts={request.get_host()},
        require_https=request.is_secure(),
    ):
        return redirect(next_url)
    return redirect("home")


def _find_account(identity, identifier):
    if is_email(identifier):
        return identity.find_by_email(identifier)
    return identity.find_by_username(identifier)


def _error(request):
    return render(request, "error.html")


# ============================================================
# 🔹 LOGIN OR REGISTER
# ============================================================
@require_http_methods(["GET", "POST"])
def login_register(request):
    """
    One form for both signing in and signing up.

    The submitted identifier decides which: an email or login name that
    already exists signs in, anything else registers. ``?next=`` is honoured
    after either, as long as it stays on this site.
    """
    next_url = request.GET.get("next") or request.POST.get("next") or ""

    if request.method == "POST":
        form = LoginRegisterForm(request.POST)
        if form.is_valid():
            identity = DjangoIdentityService(request)
            outcome = login_or_register(
                identity,
                form.cleaned_data["identifier"].strip(),
                form.cleaned_data["password"],
            )
            if outcome.succeeded:
                if outcome.created:
                    account_registered.send(
                        sender=login_register, request=request, user=outcome.user
                    )
                return _redirect_to_local(request, next_url)

            for message in outcome.errors:
                form.add_error(None, message)
    else:
        form = LoginRegisterForm()

    # If we got this far, something failed, redisplay form
    return render(request, "accounts/login_register.html", {"form": form, "next": next_url})


@require_POST
def log_off(request):
    DjangoIdentityService(request).sign_out()
    logger.info("User logged out.")
    messages.info(request, "You've been logged out.")
    return redirect("home")


# ============================================================
# 🔹 EMAIL CONFIRMATION
# ============================================================
def confirm_email(request):
    user_id = request.GET.get("userId")
    code = request.GET.get("code")
    if not user_id or not code:
        return _error(request)

    identity = DjangoIdentityService(request)
    user = identity.find_by_id(user_id)
    if user is None:
        return _error(request)

    result = identity.confirm_email(user, code)
    if not result.succeeded:
        logger.warning(f"Email confirmation failed for pk={user.pk}")
        return _error(request)
    return render(request, "accounts/confirm_email.html")


# ============================================================
# 🔹 PASSWORD RESET
# ============================================================
@require_http_methods(["GET", "POST"])
def forgot_password(request):
    """
    Send a reset link when the account exists and has an email.

    Always lands on the same confirmation page so the response does not
    reveal whether the account exists.
    """
    if request.method == "POST":
        form = ForgotPasswordForm(request.POST)
        if form.is_valid():
            identity = DjangoIdentityService(request)
            user = _find_account(identity, form.cleaned_data["identifier"].strip())
            if user is not None and user.email:
                send_password_reset(identity, user, request=request)
            return redirect("accounts:forgot_password_confirmation")
    else:
        form = ForgotPasswordForm()
    return render(request, "accounts/forgot_password.html", {"form": form})


def forgot_password_confirmation(request):
    return render(request, "accounts/forgot_password_confirmation.html")


@require_http_methods(["GET", "POST"])
def reset_password(request):
    if request.method == "GET":
        code = request.GET.get("code")
        if not code:
            return _error(request)
        form = ResetPasswordForm(initial={"code": code})
        return render(request, "accounts/reset_password.html", {"form": form})

    form = ResetPasswordForm(request.POST)
    if not form.is_valid():
        return render(request, "accounts/reset_password.html", {"form": form})

    identity = DjangoIdentityService(request)
    user = _find_account(identity, form.cleaned_data["identifier"].strip())
    if user is None:
        # Don't reveal that the user does not exist
        return redirect("accounts:reset_password_confirmation")

    result = identity.reset_password(
        user, form.cleaned_data["code"], form.cleaned_data["password"]
    )
    if result.succeeded or result.has_error(INVALID_TOKEN):
        # A bad code looks the same as an unknown account
        return redirect("accounts:reset_password_confirmation")

    for message in result.descriptions:
        form.add_error(None, message)
    return render(request, "accounts/reset_password.html", {"form": form})


def reset_password_confirmation(request):
    return render(request, "accounts/reset_password_confirmation.html")
