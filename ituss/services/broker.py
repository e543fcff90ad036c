"""Wiring of the broker components around one credential store."""

import logging
from dataclasses import dataclass

from ituss.config import Settings
from ituss.services.account_store import AccountStore, create_account_store
from ituss.services.auth_service import IdentityTokenService, PasswordAuthenticator
from ituss.services.device_service import DeviceBinder
from ituss.services.livekit_service import LivekitService
from ituss.services.media_service import MediaSessionProvider, MediaSessionTokenIssuer
from ituss.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


@dataclass
class Broker:
    store: AccountStore
    authenticator: PasswordAuthenticator
    tokens: IdentityTokenService
    devices: DeviceBinder
    media: MediaSessionTokenIssuer

    def open(self) -> None:
        self.store.open()

    def close(self) -> None:
        self.store.close()


def build_broker(
    settings: Settings,
    store: AccountStore | None = None,
    provider: MediaSessionProvider | None = None,
    clock: Clock = utcnow,
) -> Broker:
    if store is None:
        store = create_account_store(
            settings.store_backend,
            db_path=settings.db_path,
            accounts_file=settings.accounts_file,
            echo=settings.debug,
        )
    if provider is None:
        provider = LivekitService(
            settings.livekit_url,
            settings.livekit_api_key,
            settings.livekit_api_secret,
        )

    logger.info("Broker using %s store", type(store).__name__)
    return Broker(
        store=store,
        authenticator=PasswordAuthenticator(store, bcrypt_rounds=settings.bcrypt_rounds),
        tokens=IdentityTokenService(
            store,
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expire_days=settings.identity_token_expire_days,
            clock=clock,
        ),
        devices=DeviceBinder(store),
        media=MediaSessionTokenIssuer(
            provider,
            ttl_minutes=settings.media_token_ttl_minutes,
            room_prefix=settings.room_prefix,
            stream_url_template=settings.stream_url_template,
        ),
    )
