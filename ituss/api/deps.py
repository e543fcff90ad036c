"""Common API dependencies: broker access, current account extraction."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ituss.errors import MissingTokenError
from ituss.models.account import Account
from ituss.services.broker import Broker

bearer_scheme = HTTPBearer(auto_error=False)


def get_broker(request: Request) -> Broker:
    return request.app.state.broker


def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    broker: Broker = Depends(get_broker),
) -> Account:
    """Resolve the account behind the Bearer identity token."""
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    return broker.tokens.resolve(credentials.credentials)
