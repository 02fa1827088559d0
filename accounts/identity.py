"""
Identity collaborator used by the login/register flows.

The flows in ``accounts.dispatch`` and ``accounts.views`` only talk to an
``IdentityService``; they never reach for the ORM, the auth backends or the
session directly. ``DjangoIdentityService`` is the implementation bound to a
single request.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol

from django.contrib.auth import authenticate, get_user_model, login, logout
from django.contrib.auth import password_validation
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from .models import AccountProfile
from .tokens import email_confirmation_token_generator

logger = logging.getLogger(__name__)

DUPLICATE_USERNAME = "DuplicateUserName"
INVALID_USERNAME = "InvalidUserName"
PASSWORD_POLICY = "PasswordPolicy"
INVALID_TOKEN = "InvalidToken"
SIGN_IN_FAILED = "SignInFailed"


@dataclass
class IdentityError:
    code: str
    description: str


@dataclass
class IdentityResult:
    """Outcome of an account mutation or sign-in attempt."""

    succeeded: bool
    errors: List[IdentityError] = field(default_factory=list)
    user: Optional[Any] = None

    @classmethod
    def success(cls, user=None) -> "IdentityResult":
        return cls(succeeded=True, user=user)

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))

    def has_error(self, code: str) -> bool:
        return any(e.code == code for e in self.errors)

    @property
    def descriptions(self) -> List[str]:
        return [e.description for e in self.errors]


class IdentityService(Protocol):
    """
    Account store, credential checks and session handling.

    Implementations own uniqueness of login names: ``create_account`` must
    fail with a ``DuplicateUserName`` error rather than create a second
    account with the same name.
    """

    def find_by_email(self, email: str) -> Optional[Any]:
        ...

    def find_by_username(self, username: str) -> Optional[Any]:
        ...

    def find_by_id(self, user_id: str) -> Optional[Any]:
        ...

    def create_account(self, username: str, email: str, password: str) -> IdentityResult:
        ...

    def password_sign_in(self, username: str, password: str, persistent: bool) -> IdentityResult:
        ...

    def sign_in(self, user, persistent: bool) -> None:
        ...

    def sign_out(self) -> None:
        ...

    def generate_password_reset_token(self, user) -> str:
        ...

    def reset_password(self, user, code: str, new_password: str) -> IdentityResult:
        ...

    def generate_email_confirmation_token(self, user) -> str:
        ...

    def confirm_email(self, user, code: str) -> IdentityResult:
        ...


class DjangoIdentityService:
    """``IdentityService`` backed by ``django.contrib.auth`` for one request."""

    def __init__(self, request=None):
        self.request = request
        self.User = get_user_model()

    # ------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------
    def find_by_email(self, email: str):
        if not email:
            return None
        return (
            self.User.objects.filter(email__iexact=email)
            .order_by("pk")
            .first()
        )

    def find_by_username(self, username: str):
        if not username:
            return None
        return self.User.objects.filter(username=username).first()

    def find_by_id(self, user_id: str):
        try:
            return self.User.objects.filter(pk=user_id).first()
        except (ValueError, TypeError, ValidationError):
            return None

    # ------------------------------------------------------------
    # Account creation
    # ------------------------------------------------------------
    def create_account(self, username: str, email: str, password: str) -> IdentityResult:
        errors = []

        username_field = self.User._meta.get_field(self.User.USERNAME_FIELD)
        try:
            username_field.run_validators(username)
        except ValidationError as e:
            errors.extend(IdentityError(INVALID_USERNAME, m) for m in e.messages)

        candidate = self.User(username=username, email=email or "")
        try:
            password_validation.validate_password(password, candidate)
        except ValidationError as e:
            errors.extend(IdentityError(PASSWORD_POLICY, m) for m in e.messages)

        if errors:
            return IdentityResult.failed(*errors)

        # The UNIQUE constraint on username is the only uniqueness guarantee.
        try:
            with transaction.atomic():
                user = self.User.objects.create_user(
                    username=username,
                    email=email or "",
                    password=password,
                )
                AccountProfile.objects.create(user=user)
        except IntegrityError:
            logger.warning(f"Username '{username}' was taken during account creation")
            return IdentityResult.failed(
                IdentityError(DUPLICATE_USERNAME, f"Username '{username}' is already taken.")
            )

        logger.info(f"Account created: username='{username}' pk={user.pk}")
        return IdentityResult.success(user)

    # ------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------
    def password_sign_in(self, username: str, password: str, persistent: bool) -> IdentityResult:
        user = authenticate(self.request, username=username, password=password)
        if user is None:
            return IdentityResult.failed(IdentityError(SIGN_IN_FAILED, "Invalid login attempt."))
        self.sign_in(user, persistent)
        return IdentityResult.success(user)

    def sign_in(self, user, persistent: bool) -> None:
        if not hasattr(user, "backend"):
            user.backend = "django.contrib.auth.backends.ModelBackend"
        login(self.request, user)
        # None falls back to SESSION_COOKIE_AGE, 0 expires with the browser.
        self.request.session.set_expiry(None if persistent else 0)

    def sign_out(self) -> None:
        logout(self.request)

    # ------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------
    def generate_password_reset_token(self, user) -> str:
        return default_token_generator.make_token(user)

    def reset_password(self, user, code: str, new_password: str) -> IdentityResult:
        if not default_token_generator.check_token(user, code):
            return IdentityResult.failed(IdentityError(INVALID_TOKEN, "Invalid token."))
        try:
            password_validation.validate_password(new_password, user)
        except ValidationError as e:
            return IdentityResult.failed(
                *(IdentityError(PASSWORD_POLICY, m) for m in e.messages)
            )
        user.set_password(new_password)
        user.save(update_fields=["password"])
        logger.info(f"Password reset for pk={user.pk}")
        return IdentityResult.success(user)

    # ------------------------------------------------------------
    # Email confirmation
    # ------------------------------------------------------------
    def generate_email_confirmation_token(self, user) -> str:
        return email_confirmation_token_generator.make_token(user)

    def confirm_email(self, user, code: str) -> IdentityResult:
        if not user.email or not email_confirmation_token_generator.check_token(user, code):
            return IdentityResult.failed(IdentityError(INVALID_TOKEN, "Invalid token."))
        profile, _ = AccountProfile.objects.get_or_create(user=user)
        profile.email_confirmed = True
        profile.save(update_fields=["email_confirmed", "updated_at"])
        logger.info(f"Email confirmed for pk={user.pk}")
        return IdentityResult.success(user)
