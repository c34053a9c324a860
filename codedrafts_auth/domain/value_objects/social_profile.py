"""Normalized identity returned by every social identity provider client."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class SocialProfile:
    """Provider-neutral profile of a federated user.

    Attributes:
        email: Lower-cased email address attested by the provider.
        name: Display name; may be empty when the provider does not share it.
        avatar_url: Profile picture URL, if any.
    """

    email: str
    name: str
    avatar_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.email or "@" not in self.email:
            raise ValueError("Social profile must contain a valid email")
        object.__setattr__(self, "email", self.email.strip().lower())

    @property
    def display_name(self) -> str:
        """The name to store as username, falling back to the email's local part."""
        return self.name.strip() or self.email.split("@", 1)[0]
