"""In-memory stub for IdentityContextProtocol.

Simulates the wallet / auth session: tests sign a viewer in and out and
the state machine reads the identity at the start of every pass.
"""

from __future__ import annotations

from judgment_tally.application.ports.identity_context import UserProfile


class IdentityContextStub:
    """Mutable identity context for tests and development."""

    def __init__(
        self,
        identity: str | None = None,
        profile: UserProfile | None = None,
    ) -> None:
        self._identity = identity
        self._profile = profile or UserProfile()

    @property
    def current_identity(self) -> str | None:
        return self._identity

    @property
    def current_user_profile(self) -> UserProfile:
        return self._profile

    def sign_in(
        self,
        identity: str,
        display_name: str | None = None,
        email: str | None = None,
    ) -> None:
        """Make an identity the current viewer.

        The profile fields are optional and never gate a submission.
        """
        self._identity = identity
        self._profile = UserProfile(display_name=display_name, email=email)

    def sign_out(self) -> None:
        self._identity = None
        self._profile = UserProfile()
