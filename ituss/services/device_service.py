"""Device binding: one account, one device."""

import logging

from ituss.errors import MissingDeviceIdError
from ituss.models.account import Account
from ituss.services.account_store import AccountStore

logger = logging.getLogger(__name__)


class DeviceBinder:
    def __init__(self, store: AccountStore):
        self.store = store

    def register_device(self, account: Account, device_id: str) -> str:
        """Bind device_id to the account, replacing any previous device.

        The caller must already have authenticated the account. The same
        device id may be bound to several accounts; that case is logged.
        The id is stored exactly as sent.
        """
        if not device_id or not device_id.strip():
            raise MissingDeviceIdError()

        shared_with = [a.id for a in self.store.find_by_device_id(device_id) if a.id != account.id]

        previous = account.bound_device_id
        updated = self.store.set_bound_device(account.id, device_id)
        account.bound_device_id = updated.bound_device_id

        if shared_with:
            logger.info(
                "Device %s bound to account %s is already bound to other account(s): %s",
                device_id,
                account.id,
                ", ".join(shared_with),
            )
        if previous and previous != device_id:
            logger.info("Account %s replaced device %s with %s", account.id, previous, device_id)
        else:
            logger.info("Account %s bound device %s", account.id, device_id)
        return updated.bound_device_id
