"""Identity context port.

The identity provider (wallet / auth session) supplies the viewer's
address. An absent identity means an anonymous viewer: tallies are
visible, the own judgment is absent and submissions are refused.

The signer address is the only submission prerequisite. A signed-in
session always carries one, so the profile (display name, email) is
informational and an empty profile never blocks a submission.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, eq=True)
class UserProfile:
    """Profile details of the signed-in viewer, for display only.

    Attributes:
        display_name: Name shown for the viewer, if known.
        email: Email of the auth session, if known.
    """

    display_name: str | None = None
    email: str | None = None


class IdentityContextProtocol(Protocol):
    """Protocol for reading the viewer's identity."""

    @property
    def current_identity(self) -> str | None:
        """Signer address of the viewer, or None if anonymous."""
        ...

    @property
    def current_user_profile(self) -> UserProfile:
        """Profile of the viewer (empty profile if anonymous)."""
        ...
