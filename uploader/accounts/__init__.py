"""Quota-limited remote accounts and the pool that balances between them."""

from uploader.accounts.account import Account
from uploader.accounts.pool import AccountPool
from uploader.accounts.credentials import generate_accounts, load_service_accounts

__all__ = [
    "Account",
    "AccountPool",
    "generate_accounts",
    "load_service_accounts",
]
