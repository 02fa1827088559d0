"""
Random login names for accounts registered by email.

Uniqueness is ultimately enforced by the account store: a name that passes
the lookup here can still lose a race, in which case ``create_account``
reports ``DuplicateUserName`` and a fresh name is drawn. Both loops are
bounded.
"""
from __future__ import annotations

import logging
import random
import string
from typing import Callable, Container, Optional, Union

from django.conf import settings

from .identity import DUPLICATE_USERNAME, IdentityResult, IdentityService

logger = logging.getLogger(__name__)

USERNAME_ALPHABET = string.ascii_letters

_system_random = random.SystemRandom()


class UsernameGenerationError(Exception):
    """No free login name was found within the attempt budget."""


def default_length() -> int:
    return getattr(settings, "ACCOUNTS_USERNAME_LENGTH", 7)


def default_max_attempts() -> int:
    return getattr(settings, "ACCOUNTS_USERNAME_MAX_ATTEMPTS", 10)


def _check_bounds(length, max_attempts) -> None:
    if length is not None and length < 1:
        raise ValueError(f"length must be at least 1, got {length}")
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")


def random_letters(length: int, rng: Optional[random.Random] = None) -> str:
    rng = rng or _system_random
    return "".join(rng.choice(USERNAME_ALPHABET) for _ in range(length))


def generate_unique_username(
    is_taken: Union[Container[str], Callable[[str], bool]],
    length: Optional[int] = None,
    max_attempts: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Draw random names until one is not taken.

    ``is_taken`` is either a collection of existing names or a predicate.
    Raises ``UsernameGenerationError`` after ``max_attempts`` collisions.
    """
    if length is None:
        length = default_length()
    if max_attempts is None:
        max_attempts = default_max_attempts()
    _check_bounds(length, max_attempts)
    check = is_taken if callable(is_taken) else is_taken.__contains__

    for attempt in range(1, max_attempts + 1):
        candidate = random_letters(length, rng)
        if not check(candidate):
            return candidate
        logger.debug(f"Generated username collided (attempt {attempt}/{max_attempts})")

    raise UsernameGenerationError(
        f"No free username of length {length} after {max_attempts} attempts"
    )


def create_account_with_generated_username(
    identity: IdentityService,
    email: str,
    password: str,
    length: Optional[int] = None,
    max_attempts: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> IdentityResult:
    """
    Create an account under a fresh random login name.

    Retries only on ``DuplicateUserName``; any other failure (password policy
    and so on) is returned as-is.
    """
    if max_attempts is None:
        max_attempts = default_max_attempts()
    _check_bounds(length, max_attempts)

    for attempt in range(1, max_attempts + 1):
        username = generate_unique_username(
            lambda name: identity.find_by_username(name) is not None,
            length=length,
            max_attempts=max_attempts,
            rng=rng,
        )
        result = identity.create_account(username, email, password)
        if not result.has_error(DUPLICATE_USERNAME):
            return result
        logger.warning(
            f"Generated username '{username}' lost a race (attempt {attempt}/{max_attempts})"
        )

    raise UsernameGenerationError(
        f"Account creation kept colliding after {max_attempts} attempts"
    )
