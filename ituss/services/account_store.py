"""Credential store backends.

Three profiles share one interface:

- ``SqlAccountStore``: SQLite through SQLModel. Production default; email
  uniqueness is a unique index and every mutation commits on return.
- ``JsonFileAccountStore``: a single JSON document rewritten in full on every
  mutation (``{"accounts": [{id, email, passwordHash, boundDeviceId}]}``).
- ``MemoryAccountStore``: no persistence, everything is lost on restart.
  Only meant for tests and demos.

Stores hand out detached ``Account`` objects; mutating one does not change
the store. Use ``set_bound_device`` to write.
"""

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ituss.database import create_db_engine, init_db
from ituss.errors import DuplicateEmailError
from ituss.models.account import Account, new_account_id

logger = logging.getLogger(__name__)


class AccountStore:
    """Interface shared by every credential store backend."""

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def persist(self) -> None:
        """Durably flush all accounts. Mutations already call this."""

    def create_account(self, email: str, password_hash: str) -> Account:
        raise NotImplementedError

    def find_by_email(self, email: str) -> Account | None:
        raise NotImplementedError

    def find_by_id(self, account_id: str) -> Account | None:
        raise NotImplementedError

    def find_by_device_id(self, device_id: str) -> list[Account]:
        """All accounts currently bound to device_id."""
        raise NotImplementedError

    def set_bound_device(self, account_id: str, device_id: str) -> Account:
        raise NotImplementedError


# --- In-memory ---

class MemoryAccountStore(AccountStore):
    def __init__(self):
        self._lock = threading.RLock()
        self._records: dict[str, dict] = {}
        self._email_index: dict[str, str] = {}

    def create_account(self, email: str, password_hash: str) -> Account:
        with self._lock:
            if email in self._email_index:
                raise DuplicateEmailError()

            account_id = new_account_id()
            while account_id in self._records:
                account_id = new_account_id()

            now = datetime.now(timezone.utc)
            self._records[account_id] = {
                "id": account_id,
                "email": email,
                "password_hash": password_hash,
                "bound_device_id": None,
                "created_at": now,
                "updated_at": now,
            }
            self._email_index[email] = account_id
            try:
                self.persist()
            except Exception:
                del self._records[account_id]
                del self._email_index[email]
                raise
            return Account(**self._records[account_id])

    def find_by_email(self, email: str) -> Account | None:
        with self._lock:
            account_id = self._email_index.get(email)
            if account_id is None:
                return None
            return Account(**self._records[account_id])

    def find_by_id(self, account_id: str) -> Account | None:
        with self._lock:
            record = self._records.get(account_id)
            return Account(**record) if record else None

    def find_by_device_id(self, device_id: str) -> list[Account]:
        with self._lock:
            return [
                Account(**record)
                for record in self._records.values()
                if record["bound_device_id"] == device_id
            ]

    def set_bound_device(self, account_id: str, device_id: str) -> Account:
        with self._lock:
            record = self._records.get(account_id)
            if record is None:
                raise LookupError(f"Account {account_id} not found")
            previous = (record["bound_device_id"], record["updated_at"])
            record["bound_device_id"] = device_id
            record["updated_at"] = datetime.now(timezone.utc)
            try:
                self.persist()
            except Exception:
                record["bound_device_id"], record["updated_at"] = previous
                raise
            return Account(**record)


# --- JSON file ---

class JsonFileAccountStore(MemoryAccountStore):
    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)

    def open(self) -> None:
        with self._lock:
            self._records.clear()
            self._email_index.clear()
            for item in self._load():
                try:
                    record = {
                        "id": str(item["id"]),
                        "email": item["email"],
                        "password_hash": item["passwordHash"],
                        # Older files stored the device under "deviceId"
                        "bound_device_id": item.get("boundDeviceId", item.get("deviceId")),
                    }
                except KeyError as e:
                    logger.warning("Skipping malformed account record in %s: missing %s", self.path, e)
                    continue
                now = datetime.now(timezone.utc)
                record["created_at"] = now
                record["updated_at"] = now
                self._records[record["id"]] = record
                self._email_index[record["email"]] = record["id"]
        logger.info("Loaded %d account(s) from %s", len(self._records), self.path)

    def close(self) -> None:
        self.persist()

    def _load(self) -> list[dict]:
        try:
            parsed = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, starting empty: %s", self.path, e)
            return []

        if not isinstance(parsed, dict):
            return []
        items = parsed.get("accounts", parsed.get("users", []))
        return [item for item in items if isinstance(item, dict)]

    def persist(self) -> None:
        with self._lock:
            document = {
                "accounts": [
                    {
                        "id": r["id"],
                        "email": r["email"],
                        "passwordHash": r["password_hash"],
                        "boundDeviceId": r["bound_device_id"],
                    }
                    for r in self._records.values()
                ]
            }
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".db-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise


# --- SQLite ---

class SqlAccountStore(AccountStore):
    def __init__(self, db_path: Path | None = None, engine: Engine | None = None, echo: bool = False):
        if engine is None:
            if db_path is None:
                raise ValueError("SqlAccountStore needs a db_path or an engine")
            engine = create_db_engine(db_path, echo=echo)
        self.engine = engine

    def open(self) -> None:
        init_db(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    def _session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    def create_account(self, email: str, password_hash: str) -> Account:
        with self._session() as session:
            existing = session.exec(select(Account).where(Account.email == email)).first()
            if existing:
                raise DuplicateEmailError()

            account = Account(email=email, password_hash=password_hash)
            session.add(account)
            try:
                session.commit()
            except IntegrityError:
                # Lost a race with a concurrent signup for the same email
                session.rollback()
                raise DuplicateEmailError()
            session.refresh(account)
            return account

    def find_by_email(self, email: str) -> Account | None:
        with self._session() as session:
            return session.exec(select(Account).where(Account.email == email)).first()

    def find_by_id(self, account_id: str) -> Account | None:
        with self._session() as session:
            return session.get(Account, account_id)

    def find_by_device_id(self, device_id: str) -> list[Account]:
        with self._session() as session:
            return list(session.exec(select(Account).where(Account.bound_device_id == device_id)).all())

    def set_bound_device(self, account_id: str, device_id: str) -> Account:
        with self._session() as session:
            account = session.get(Account, account_id)
            if account is None:
                raise LookupError(f"Account {account_id} not found")
            account.bound_device_id = device_id
            account.updated_at = datetime.now(timezone.utc)
            session.add(account)
            session.commit()
            session.refresh(account)
            return account


def create_account_store(backend: str, db_path: Path, accounts_file: Path, echo: bool = False) -> AccountStore:
    """Build the store selected by configuration."""
    if backend == "sqlite":
        return SqlAccountStore(db_path=db_path, echo=echo)
    if backend == "json":
        return JsonFileAccountStore(accounts_file)
    if backend == "memory":
        logger.warning("Using in-memory account store: accounts are lost on restart")
        return MemoryAccountStore()
    raise ValueError(f"Unknown store backend: {backend!r}")
