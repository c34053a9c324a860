"""Security helpers shared by the services: random identifiers and log masking."""

import secrets
import string

_ID_ALPHABET = string.ascii_letters + string.digits


def generate_id(length: int = 9) -> str:
    """Generate a random alphanumeric identifier.

    Args:
        length: Number of characters (9 for token rows).

    Returns:
        str: Identifier drawn from ``secrets`` so it is not guessable.
    """
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def mask_email(email: str) -> str:
    """Mask an email address for logging, keeping the first character and the domain.

    >>> mask_email("alice@example.com")
    'a***@example.com'
    """
    if not email or "@" not in email:
        return "***"
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}"
