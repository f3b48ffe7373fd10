"""Balances net of value tied up in pending outgoing transfers."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import AbstractSet, Callable, Iterable, Sequence, TypeVar

from ..node.gateway import NodeGateway
from ..node.models import AccountBalance, Address, Page, PendingTransfer

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 100


def collect_all_pages(fetch: Callable[[int, int], Page[T] | None], page_size: int) -> list[T]:
    """Drain a paginated feed.

    Stops once ``page_number * page_size >= total_elements``. A missing page is
    treated as the end of the feed.
    """

    items: list[T] = []
    page_number = 0
    while True:
        page = fetch(page_number, page_size)
        if page is None:
            break
        items.extend(page.items)
        page_number += 1
        if page_number * page_size >= page.total_elements:
            break
        if not page.items:
            # the node reported more rows than it is serving; don't spin
            LOGGER.warning(
                "wallet.paging.short_feed",
                extra={"page_number": page_number, "total_elements": page.total_elements},
            )
            break
    return items


def pending_outgoing_sum(balance: AccountBalance, pending: Iterable[PendingTransfer]) -> int:
    """Value the holder of ``balance`` has committed in not yet confirmed transfers.

    Amounts count when the transfer spends the balance's token. Fees are paid
    in the native asset, so a native balance also carries the fee of every
    outgoing transfer, whatever token it moves.
    """

    total = 0
    for transfer in pending:
        if transfer.from_address != balance.address:
            continue
        if transfer.token_address == balance.token_address and transfer.amount:
            total += transfer.amount
        if balance.is_native and transfer.fee:
            total += transfer.fee
    return total


def adjust_balance(balance: AccountBalance, pending: Sequence[PendingTransfer]) -> AccountBalance:
    outgoing = pending_outgoing_sum(balance, pending)
    if outgoing == 0:
        return balance
    return replace(balance, amount=max(0, balance.amount - outgoing))


class BalanceReconciler:
    """Fetches remote balances and pending transfers, then nets them."""

    def __init__(self, gateway: NodeGateway, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._gateway = gateway
        self._page_size = page_size

    def fetch_balances(
        self, addresses: AbstractSet[Address], token_addresses: AbstractSet[Address]
    ) -> list[AccountBalance]:
        return collect_all_pages(
            lambda number, size: self._gateway.get_account_balances(
                number, size, addresses, token_addresses
            ),
            self._page_size,
        )

    def fetch_pending(
        self, addresses: AbstractSet[Address], token_addresses: AbstractSet[Address]
    ) -> list[PendingTransfer]:
        # all transfer types: any pending spend reduces what is available
        return collect_all_pages(
            lambda number, size: self._gateway.get_pending_transfers(
                number, size, addresses, token_addresses, None
            ),
            self._page_size,
        )

    def reconcile(
        self, addresses: AbstractSet[Address], token_addresses: AbstractSet[Address]
    ) -> list[AccountBalance]:
        balances = self.fetch_balances(addresses, token_addresses)
        pending = self.fetch_pending(addresses, token_addresses)
        adjusted = [adjust_balance(balance, pending) for balance in balances]
        LOGGER.debug(
            "wallet.balances.reconciled",
            extra={
                "addresses": len(addresses),
                "balances": len(balances),
                "pending": len(pending),
                "adjusted": sum(1 for old, new in zip(balances, adjusted) if old is not new),
            },
        )
        return adjusted


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "BalanceReconciler",
    "adjust_balance",
    "collect_all_pages",
    "pending_outgoing_sum",
]
