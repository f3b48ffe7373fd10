"""Wallet query service: the entry point routers call into."""

from __future__ import annotations

import logging
from typing import AbstractSet

from ..config.schema import PagingConfig
from ..errors import WalletNotFoundError, WalletValidationError
from ..node.gateway import NodeGateway
from ..node.models import (
    ZERO_ADDRESS,
    AccountBalance,
    Address,
    MempoolResult,
    NodeInfo,
    RecommendedFees,
    Token,
    TransferType,
)
from ..services.cache import CacheTier, TtlCache
from .balances import BalanceReconciler
from .stitcher import TransferPageStitcher, UnifiedTransferPage
from .validation import validate_hex_data, validate_page_request

LOGGER = logging.getLogger(__name__)


def _require_addresses(addresses: AbstractSet[Address]) -> None:
    if not addresses:
        raise WalletValidationError("At least one address is required.")


class WalletService:
    def __init__(
        self,
        gateway: NodeGateway,
        *,
        cache: TtlCache | None = None,
        paging: PagingConfig | None = None,
    ) -> None:
        self._gateway = gateway
        self._cache = cache or TtlCache()
        self._paging = paging or PagingConfig()
        self._reconciler = BalanceReconciler(gateway, page_size=self._paging.reconcile_page_size)
        self._stitcher = TransferPageStitcher(gateway, height_provider=self._latest_block_height)

    def _latest_block_height(self) -> int | None:
        return self._cache.get_or_set(
            CacheTier.SHORT, ("latest_block_height",), self._gateway.get_latest_block_height
        )

    @property
    def paging(self) -> PagingConfig:
        return self._paging

    def get_balances(
        self,
        addresses: AbstractSet[Address],
        token_addresses: AbstractSet[Address] | None = None,
    ) -> list[AccountBalance]:
        """Balances adjusted for pending outgoing transfers.

        An empty token set means the native asset only.
        """

        _require_addresses(addresses)
        tokens = frozenset(token_addresses or ()) or frozenset({ZERO_ADDRESS})
        LOGGER.debug("wallet.balances", extra={"addresses": len(addresses), "tokens": len(tokens)})
        return self._reconciler.reconcile(frozenset(addresses), tokens)

    def get_transfers(
        self,
        addresses: AbstractSet[Address],
        token_addresses: AbstractSet[Address] | None = None,
        transfer_type: TransferType | None = None,
        page_number: int = 0,
        page_size: int | None = None,
    ) -> UnifiedTransferPage:
        """Pending transfers first, then confirmed, newest first within each.

        An empty token set means all tokens.
        """

        _require_addresses(addresses)
        size = self._paging.default_page_size if page_size is None else page_size
        validate_page_request(page_number, size, max_page_size=self._paging.max_page_size)
        LOGGER.debug(
            "wallet.transfers",
            extra={"addresses": len(addresses), "page_number": page_number, "page_size": size},
        )
        return self._stitcher.stitch(
            frozenset(addresses),
            frozenset(token_addresses or ()),
            transfer_type,
            page_number,
            size,
        )

    def get_tokens(self) -> list[Token]:
        return self._cache.get_or_set(CacheTier.LONG, ("tokens",), self._gateway.get_all_tokens)

    def get_token(self, address: Address) -> Token:
        token = self._cache.get_or_set(
            CacheTier.LONG, ("token", address), lambda: self._gateway.get_token(address)
        )
        if token is None:
            raise WalletNotFoundError(f"Token {address} not found.")
        return token

    def get_next_nonce(self, address: Address) -> int:
        # read through: every accepted submission advances it
        summary = self._gateway.get_account_summary(address)
        # a fresh account has never sent anything
        return summary.next_nonce if summary.next_nonce is not None else 0

    def get_recommended_fees(self) -> RecommendedFees | None:
        return self._cache.get_or_set(
            CacheTier.SHORT, ("recommended_fees",), self._gateway.get_recommended_fees
        )

    def get_node_info(self) -> NodeInfo:
        return self._cache.get_or_set(CacheTier.SHORT, ("node_info",), self._gateway.get_node_info)

    def submit_transaction(self, hex_data: str) -> MempoolResult:
        payload = validate_hex_data(hex_data)
        result = self._gateway.submit_transaction(payload)
        LOGGER.info(
            "wallet.tx.submitted",
            extra={"status": result.status.value, "tx_hash": result.tx_hash},
        )
        return result


__all__ = ["WalletService"]
