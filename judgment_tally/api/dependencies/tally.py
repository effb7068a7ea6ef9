"""Tally API dependencies.

Each request gets its own identity context (from the X-Signer-Address
header), its own notification channel and its own session / vote
service, all sharing the process-wide attestation service.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass

from fastapi import Depends, Header

from judgment_tally.application.ports.identity_context import UserProfile
from judgment_tally.application.services.comment_votes_service import (
    CommentVotesService,
)
from judgment_tally.application.services.site_ratings_session import (
    SiteRatingsSession,
)
from judgment_tally.bootstrap.tally import (
    build_comment_votes_service,
    build_site_ratings_session,
)
from judgment_tally.infrastructure.adapters.notification import (
    LoggingNotificationChannel,
)

SIGNER_HEADER = "X-Signer-Address"


@dataclass(frozen=True)
class RequestIdentityContext:
    """Identity context fixed for the lifetime of one request."""

    identity: str | None = None

    @property
    def current_identity(self) -> str | None:
        return self.identity

    @property
    def current_user_profile(self) -> UserProfile:
        return UserProfile()


def get_request_identity(
    signer_address: str | None = Header(default=None, alias=SIGNER_HEADER),
) -> RequestIdentityContext:
    """Identity of the caller; blank headers mean anonymous."""
    if signer_address is None or not signer_address.strip():
        return RequestIdentityContext()
    return RequestIdentityContext(identity=signer_address.strip())


def get_notification_channel() -> LoggingNotificationChannel:
    return LoggingNotificationChannel()


async def get_site_ratings_session(
    identity: RequestIdentityContext = Depends(get_request_identity),
    channel: LoggingNotificationChannel = Depends(get_notification_channel),
) -> AsyncIterator[SiteRatingsSession]:
    """Site ratings session scoped to the request."""
    session = build_site_ratings_session(identity, channel)
    try:
        yield session
    finally:
        await session.close()


async def get_comment_votes_service(
    identity: RequestIdentityContext = Depends(get_request_identity),
    channel: LoggingNotificationChannel = Depends(get_notification_channel),
) -> AsyncIterator[CommentVotesService]:
    """Comment votes service scoped to the request."""
    service = build_comment_votes_service(identity, channel)
    try:
        yield service
    finally:
        await service.close()
