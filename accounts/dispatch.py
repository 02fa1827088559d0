from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .classifier import is_email
from .identity import IdentityResult, IdentityService
from .usernames import UsernameGenerationError, create_account_with_generated_username

logger = logging.getLogger(__name__)

INVALID_LOGIN_ATTEMPT = "Invalid login attempt."
USERNAME_UNAVAILABLE = "Could not allocate a username. Please try again."


@dataclass
class LoginRegisterOutcome:
    """Result of one login-or-register submission."""

    succeeded: bool
    created: bool = False
    user: Optional[Any] = None
    errors: List[str] = field(default_factory=list)


def login_or_register(
    identity: IdentityService,
    identifier: str,
    password: str,
) -> LoginRegisterOutcome:
    """
    Sign in an existing account or register a new one.

    - Email that matches an account: sign in as that account.
    - Email with no account: register under a generated login name.
    - Anything else is a login name: sign in if it exists, otherwise
      register it with an empty email.

    Failures come back as ``errors``; nothing is raised. A failed sign-in
    always reports the same message whatever the cause.
    """

    if is_email(identifier):
        existing = identity.find_by_email(identifier)
        if existing is not None:
            return _sign_in(identity, existing.username, password)

        try:
            result = create_account_with_generated_username(identity, identifier, password)
        except UsernameGenerationError as e:
            logger.error(f"Registration by email aborted: {e}")
            return LoginRegisterOutcome(succeeded=False, errors=[USERNAME_UNAVAILABLE])
        return _finish_registration(identity, result)

    existing = identity.find_by_username(identifier)
    if existing is not None:
        return _sign_in(identity, identifier, password)

    result = identity.create_account(identifier, "", password)
    return _finish_registration(identity, result)


def _sign_in(identity: IdentityService, username: str, password: str) -> LoginRegisterOutcome:
    result = identity.password_sign_in(username, password, persistent=True)
    if result.succeeded:
        logger.info("User logged in.")
        return LoginRegisterOutcome(succeeded=True, user=result.user)

    logger.warning("Invalid login attempt.")
    return LoginRegisterOutcome(succeeded=False, errors=[INVALID_LOGIN_ATTEMPT])


def _finish_registration(identity: IdentityService, result: IdentityResult) -> LoginRegisterOutcome:
    if not result.succeeded:
        logger.warning(f"Account creation failed: {result.descriptions}")
        return LoginRegisterOutcome(succeeded=False, errors=result.descriptions)

    identity.sign_in(result.user, persistent=True)
    logger.info("User created a new account with password.")
    return LoginRegisterOutcome(succeeded=True, created=True, user=result.user)
