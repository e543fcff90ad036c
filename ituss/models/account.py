"""Account model."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def new_account_id() -> str:
    return f"acc_{secrets.token_hex(8)}"


class Account(SQLModel, table=True):
    __tablename__ = "accounts"

    id: str = Field(default_factory=new_account_id, primary_key=True)
    email: str = Field(unique=True, index=True)
    password_hash: str
    bound_device_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
