from django.core.exceptions import ValidationError
from django.core.validators import validate_email


def is_email(value) -> bool:
    """Return True when ``value`` is a well-formed email address."""
    if not value:
        return False
    try:
        validate_email(value)
    except ValidationError:
        return False
    return True
