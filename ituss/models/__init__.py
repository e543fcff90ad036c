"""iTuss Database Models."""

from ituss.models.account import Account

__all__ = [
    "Account",
]
