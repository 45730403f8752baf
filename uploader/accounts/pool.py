"""Pool of accounts with quota-aware selection and lazy bootstrap."""

import asyncio
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from common.logging_config import get_logger
from uploader.accounts.account import Account
from uploader.exceptions import BootstrapError

logger = get_logger(__name__)

Bootstrap = Callable[[], Awaitable[List[Account]]]


class AccountPool:
    """
    Owns a set of accounts keyed by identifier and picks the one with the
    most available capacity.
    """

    def __init__(self, accounts: Optional[Iterable[Account]] = None):
        self.accounts: Dict[str, Account] = {}
        self.lock = asyncio.Lock()
        for account in accounts or []:
            self.add_account(account)

    def __len__(self) -> int:
        return len(self.accounts)

    def is_empty(self) -> bool:
        return not self.accounts

    def add_account(self, account: Account) -> str:
        """Register `account`; no-op if its identifier is already known."""
        if account.identifier not in self.accounts:
            self.accounts[account.identifier] = account
        return account.identifier

    async def ensure_bootstrapped(self, bootstrap: Bootstrap) -> None:
        """
        Populate an empty pool from `bootstrap`, at most once at a time.

        Concurrent callers queue on the pool lock; the first one runs the
        bootstrap and the rest find the pool already populated.

        Raises:
            BootstrapError: If the collaborator failed or returned no accounts
        """
        async with self.lock:
            if not self.is_empty():
                return

            try:
                accounts = await bootstrap()
            except Exception as e:
                raise BootstrapError(f"Failed to load accounts: {e}") from e

            if not accounts:
                raise BootstrapError("Failed to load accounts: credentials yielded none")

            for account in accounts:
                self.add_account(account)
            logger.info(f"Bootstrapped account pool with {len(self.accounts)} accounts")

    async def refresh_all(self) -> None:
        """Refresh every dirty quota concurrently; failures keep the stale snapshot."""
        accounts = list(self.accounts.values())
        results = await asyncio.gather(
            *(account.refresh_quota() for account in accounts),
            return_exceptions=True,
        )
        for account, result in zip(accounts, results):
            if isinstance(result, Exception):
                logger.error(f"Quota refresh failed for {account.identifier}, using previous snapshot: {result}")

    async def get_most_available_account(self) -> Optional[Account]:
        """
        Refresh quotas and return the account with the largest positive
        `limit - usage`. Ties go to the smallest identifier.

        Returns:
            The selected account, or None when every account is full
        """
        await self.refresh_all()

        candidates = [account for account in self.accounts.values() if account.available > 0]
        if not candidates:
            return None

        return min(candidates, key=lambda account: (-account.available, account.identifier))

    async def close(self) -> None:
        for account in self.accounts.values():
            await account.close()
