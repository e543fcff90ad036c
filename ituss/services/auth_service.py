"""Authentication business logic: signup, password login, identity tokens.

Identity tokens are stateless: a token stays valid until it expires, even if
the account's device changes. The only way to get a new one is to log in
again.
"""

import logging
from datetime import timedelta

import jwt

from ituss.errors import (
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingFieldsError,
)
from ituss.models.account import Account
from ituss.services.account_store import AccountStore
from ituss.utils.clock import Clock, utcnow
from ituss.utils.security import decode_token, encode_token, hash_password, verify_password

logger = logging.getLogger(__name__)

TOKEN_TYPE = "identity"


class PasswordAuthenticator:
    def __init__(self, store: AccountStore, bcrypt_rounds: int = 10):
        self.store = store
        self.bcrypt_rounds = bcrypt_rounds
        self._dummy_hash: str | None = None

    def signup(self, email: str, password: str) -> Account:
        """Create an account. Raises MissingFieldsError or DuplicateEmailError."""
        if not email or not password:
            raise MissingFieldsError()

        account = self.store.create_account(email, hash_password(password, self.bcrypt_rounds))
        logger.info("Account created: %s", account.id)
        return account

    def verify(self, email: str, password: str) -> Account:
        """Return the account for a correct email/password pair.

        Unknown email and wrong password raise the same InvalidCredentialsError.
        """
        account = self.store.find_by_email(email) if email else None
        if account is None:
            # Burn the same bcrypt time as a real check
            verify_password(password or "", self._get_dummy_hash())
            logger.warning("Login failed: unknown email")
            raise InvalidCredentialsError()

        if not password or not verify_password(password, account.password_hash):
            logger.warning("Login failed: wrong password for account %s", account.id)
            raise InvalidCredentialsError()

        return account

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("ituss-dummy-password", self.bcrypt_rounds)
        return self._dummy_hash


class IdentityTokenService:
    def __init__(
        self,
        store: AccountStore,
        secret: str,
        algorithm: str = "HS256",
        expire_days: int = 7,
        clock: Clock = utcnow,
    ):
        if not secret:
            raise ValueError("Identity token secret must be configured")
        self.store = store
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = timedelta(days=expire_days)
        self.clock = clock

    def issue(self, account_id: str) -> str:
        now = self.clock()
        return encode_token(
            {"sub": account_id, "type": TOKEN_TYPE},
            self.secret,
            self.algorithm,
            issued_at=now,
            expires_at=now + self.ttl,
        )

    def verify(self, token: str) -> str:
        """Return the account id the token was issued for.

        Raises InvalidTokenError or ExpiredTokenError.
        """
        return self._load_account(token).id

    def resolve(self, token: str) -> Account:
        """Verify the token and return its account."""
        return self._load_account(token)

    def _load_account(self, token: str) -> Account:
        try:
            payload = decode_token(token, self.secret, self.algorithm)
        except jwt.PyJWTError as e:
            logger.warning("Rejected identity token: %s", e)
            raise InvalidTokenError()

        if payload.get("type") != TOKEN_TYPE:
            logger.warning("Rejected identity token: wrong type %r", payload.get("type"))
            raise InvalidTokenError()

        try:
            expires_at = int(payload["exp"])
        except (TypeError, ValueError):
            logger.warning("Rejected identity token: bad exp claim")
            raise InvalidTokenError()

        if expires_at <= self.clock().timestamp():
            logger.warning("Rejected identity token: expired for account %s", payload["sub"])
            raise ExpiredTokenError()

        account_id = str(payload["sub"])
        account = self.store.find_by_id(account_id)
        if account is None:
            logger.warning("Rejected identity token: account %s no longer exists", account_id)
            raise InvalidTokenError()

        return account
