"""LiveKit token minting.

Thin wrapper around the `livekit-api` package. Only token generation is
used here; rooms and media transport are managed by LiveKit itself.

Usage:
    service = LivekitService(url, api_key, api_secret)
    token = await service.mint_token(grant)
"""

import logging
from datetime import timedelta

from livekit import api

from ituss.errors import ProviderError
from ituss.services.media_service import MediaGrant

logger = logging.getLogger(__name__)


class LivekitService:
    def __init__(self, url: str, api_key: str, api_secret: str):
        self._url = url
        self._api_key = api_key
        self._api_secret = api_secret

    @property
    def ws_url(self) -> str:
        return self._url

    async def mint_token(self, grant: MediaGrant) -> str:
        """Sign a LiveKit access token for the grant.

        Raises ProviderError when LiveKit is not configured or the SDK fails.
        """
        if not self._url or not self._api_key or not self._api_secret:
            logger.error("LiveKit URL, API key or API secret not configured")
            raise ProviderError()

        logger.info("Creating LiveKit access token for identity=%s, room=%s", grant.identity, grant.room_name)
        try:
            token = (
                api.AccessToken(self._api_key, self._api_secret)
                .with_identity(grant.identity)
                .with_name(grant.name)
                .with_ttl(timedelta(seconds=grant.ttl_seconds))
                .with_grants(
                    api.VideoGrants(
                        room_join=grant.room_join,
                        room=grant.room_name,
                        can_publish=grant.can_publish,
                        can_subscribe=grant.can_subscribe,
                        can_publish_data=grant.can_publish_data,
                    )
                )
            )
            return token.to_jwt()
        except Exception as e:
            logger.exception("LiveKit token generation failed for room=%s: %s", grant.room_name, e)
            raise ProviderError() from e
