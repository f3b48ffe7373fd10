from __future__ import annotations

from typing import AbstractSet, Protocol

from .models import (
    AccountBalance,
    AccountSummary,
    Address,
    ConfirmedTransfer,
    MempoolResult,
    NodeInfo,
    Page,
    PendingTransfer,
    RecommendedFees,
    Token,
    TransferType,
)


class NodeGateway(Protocol):
    """Read interface the wallet services need from the ledger node.

    Bulk reads are filtered server-side by the same address/token/type
    predicate the caller passes and ordered newest first.
    """

    def get_account_balances(
        self,
        page_number: int,
        page_size: int,
        addresses: AbstractSet[Address],
        token_addresses: AbstractSet[Address],
    ) -> Page[AccountBalance]: ...

    def get_pending_transfers(
        self,
        page_number: int,
        page_size: int,
        addresses: AbstractSet[Address],
        token_addresses: AbstractSet[Address],
        transfer_type: TransferType | None = None,
    ) -> Page[PendingTransfer]: ...

    def get_confirmed_transfers(
        self,
        page_number: int,
        page_size: int,
        addresses: AbstractSet[Address],
        token_addresses: AbstractSet[Address],
        transfer_type: TransferType | None = None,
    ) -> Page[ConfirmedTransfer]: ...

    def get_latest_block_height(self) -> int | None: ...

    def get_account_summary(self, address: Address) -> AccountSummary: ...

    def get_all_tokens(self) -> list[Token]: ...

    def get_token(self, address: Address) -> Token | None: ...

    def get_recommended_fees(self) -> RecommendedFees | None: ...

    def get_node_info(self) -> NodeInfo: ...

    def submit_transaction(self, hex_data: str) -> MempoolResult: ...


__all__ = ["NodeGateway"]
