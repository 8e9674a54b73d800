"""
Profile Hook
Seller profile, balance and linked accounts.

Mutators return True/False and put a readable message into `error`
instead of raising, so forms can show it next to the field.
"""

import asyncio
import logging
from typing import List, Optional

from ..models import Profile
from .base import ResourceHook, call

logger = logging.getLogger(__name__)


class ProfileHook(ResourceHook[Profile]):
    error_message = "Failed to load profile"

    def __init__(self, client):
        self.client = client
        super().__init__(self._load_profile, None)
        self.balance_kopecks: int = 0
        self.linked_accounts: List[dict] = []
        self._links_task: Optional[asyncio.Task] = None

    async def _load_profile(self, _filters):
        return await call(self.client.get_profile)

    def transform(self, result) -> Profile:
        return Profile.from_dict(result)

    def _on_success(self, filters, data: Profile) -> None:
        self.balance_kopecks = data.balance_kopecks

    def mount(self) -> Optional[asyncio.Task]:
        task = self.refetch()
        self._links_task = asyncio.get_running_loop().create_task(self.load_linked_accounts())
        return task

    def close(self) -> None:
        if self._links_task is not None and not self._links_task.done():
            self._links_task.cancel()
        super().close()

    # =========================================================================
    # Secondary Loads
    # =========================================================================

    async def load_balance(self) -> None:
        try:
            result = await call(self.client.get_balance)
        except Exception:
            logger.exception("Failed to load balance")
            return
        self.balance_kopecks = result.get("balance_kopecks", 0)

    async def load_linked_accounts(self) -> None:
        try:
            self.linked_accounts = await call(self.client.get_linked_accounts)
        except Exception:
            logger.exception("Failed to load linked accounts")

    # =========================================================================
    # Mutations
    # =========================================================================

    async def _mutate(self, message: str, fn, *args) -> bool:
        self.error = None
        try:
            await call(fn, *args)
        except Exception:
            logger.exception(message)
            self.error = message
            return False
        return True

    async def update_profile(self, name: str) -> bool:
        if not await self._mutate("Failed to update profile", self.client.update_profile, name):
            return False
        self.refetch()
        await self.wait()
        return True

    async def change_password(self, old_password: str, new_password: str) -> bool:
        return await self._mutate(
            "Failed to change password",
            self.client.change_password, old_password, new_password,
        )

    async def add_balance(self, amount_kopecks: int) -> bool:
        if not await self._mutate("Failed to top up balance", self.client.add_balance, amount_kopecks):
            return False
        await self.load_balance()
        return True

    async def withdraw_balance(self, amount_kopecks: int) -> bool:
        if not await self._mutate("Failed to withdraw funds", self.client.withdraw_balance, amount_kopecks):
            return False
        await self.load_balance()
        return True
