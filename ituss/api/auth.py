"""Signup, login and account API endpoints."""

from fastapi import APIRouter, Depends

from ituss.api.deps import get_broker, get_current_account
from ituss.models.account import Account
from ituss.schemas.auth import (
    AccountResponse,
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
)
from ituss.services.broker import Broker

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=SignupResponse)
def signup(request: SignupRequest, broker: Broker = Depends(get_broker)):
    """Create an account with email and password."""
    broker.authenticator.signup(request.email, request.password)
    return SignupResponse()


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, broker: Broker = Depends(get_broker)):
    """Check email/password and return an identity token."""
    account = broker.authenticator.verify(request.email, request.password)
    return LoginResponse(token=broker.tokens.issue(account.id))


@router.get("/me", response_model=AccountResponse)
def get_me(account: Account = Depends(get_current_account)):
    return AccountResponse(
        id=account.id,
        email=account.email,
        device_id=account.bound_device_id,
    )
