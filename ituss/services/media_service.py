"""Media session token issuance.

A viewer gets a subscribe-only grant for the room of the account's bound
device. Signing the grant is delegated to the media-session provider.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

from ituss.errors import NoBoundDeviceError, ProviderError
from ituss.models.account import Account

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaGrant:
    identity: str
    name: str
    room_name: str
    ttl_seconds: int
    room_join: bool = True
    can_subscribe: bool = True
    can_publish: bool = False
    can_publish_data: bool = False


@dataclass(frozen=True)
class MediaSession:
    room_name: str
    ws_url: str
    token: str
    grant: MediaGrant


class MediaSessionProvider(Protocol):
    ws_url: str

    async def mint_token(self, grant: MediaGrant) -> str: ...


def room_name_for_device(device_id: str, prefix: str = "room-") -> str:
    return f"{prefix}{device_id}"


class MediaSessionTokenIssuer:
    def __init__(
        self,
        provider: MediaSessionProvider,
        ttl_minutes: int = 60,
        room_prefix: str = "room-",
        stream_url_template: str = "",
    ):
        self.provider = provider
        self.ttl_seconds = ttl_minutes * 60
        self.room_prefix = room_prefix
        self.stream_url_template = stream_url_template

    def _require_device(self, account: Account) -> str:
        if not account.bound_device_id:
            logger.info("Account %s requested a media session without a device", account.id)
            raise NoBoundDeviceError()
        return account.bound_device_id

    def build_grant(self, account: Account) -> MediaGrant:
        device_id = self._require_device(account)
        return MediaGrant(
            # Unique per request so concurrent viewers of one account stay distinct
            identity=f"viewer-{account.id}-{secrets.token_hex(3)}",
            name=account.id,
            room_name=room_name_for_device(device_id, self.room_prefix),
            ttl_seconds=self.ttl_seconds,
        )

    async def issue_media_token(self, account: Account) -> MediaSession:
        """Mint a media session token for the account's device room.

        Raises NoBoundDeviceError before any provider call, and ProviderError
        if signing fails. Failed calls are not retried.
        """
        grant = self.build_grant(account)
        try:
            token = await self.provider.mint_token(grant)
        except ProviderError:
            raise
        except Exception as e:
            logger.exception("Media provider failed for account %s: %s", account.id, e)
            raise ProviderError() from e

        logger.info("Issued media token for account %s in %s", account.id, grant.room_name)
        return MediaSession(
            room_name=grant.room_name,
            ws_url=self.provider.ws_url,
            token=token,
            grant=grant,
        )

    def stream_info(self, account: Account) -> tuple[str, str]:
        """Device id and plain stream URL for viewers without WebRTC."""
        device_id = self._require_device(account)
        url = self.stream_url_template.replace("{device_id}", quote(device_id, safe=""))
        return device_id, url
