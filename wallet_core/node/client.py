"""HTTP client for the ledger node REST API."""

from __future__ import annotations

import logging
import time
from typing import AbstractSet, Any, Callable, TypeVar

import httpx

from ..config.schema import NodeConfig, RetryConfig
from ..errors import NodeResponseError
from ..metrics.node import record_node_request
from . import codec
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
from .retry import NO_RETRY, RetryPolicy, call_with_retry

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_DIRECTION_DESC = "DESC"


def retry_policy_from_config(config: RetryConfig) -> RetryPolicy:
    return RetryPolicy(max_attempts=config.max_attempts, delay_s=config.delay_s)


class NodeClient:
    """Synchronous node client; every read goes through :func:`call_with_retry`."""

    def __init__(
        self,
        config: NodeConfig,
        *,
        retry: RetryPolicy | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._retry = retry or RetryPolicy()
        headers = {"User-Agent": config.user_agent, "Accept": "application/json"}
        if config.api_key:
            headers["X-API-Key"] = config.api_key
        self._client = httpx.Client(
            base_url=config.base_url,
            headers=headers,
            timeout=httpx.Timeout(config.read_timeout_s, connect=config.connect_timeout_s),
            follow_redirects=True,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Helpers

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "NodeClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(
        self,
        endpoint: str,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        started = time.perf_counter()
        try:
            response = self._client.request(method, path, json=json, params=params)
        except httpx.TransportError:
            record_node_request(endpoint, "transport_error", time.perf_counter() - started)
            raise
        elapsed = time.perf_counter() - started
        if response.status_code >= 400:
            record_node_request(endpoint, "http_error", elapsed)
            LOGGER.warning(
                "node.http_error",
                extra={"endpoint": endpoint, "status": response.status_code},
            )
            raise NodeResponseError(
                f"node returned HTTP {response.status_code} for {endpoint}",
                node_status=response.status_code,
                endpoint=endpoint,
            )
        record_node_request(endpoint, "ok", elapsed)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise NodeResponseError(
                f"node returned a malformed body for {endpoint}",
                node_status=response.status_code,
                endpoint=endpoint,
            ) from exc

    def _read(self, endpoint: str, method: str, path: str, **kwargs: Any) -> Any:
        return call_with_retry(
            lambda: self._send(endpoint, method, path, **kwargs),
            self._retry,
            endpoint=endpoint,
        )

    @staticmethod
    def _bulk_body(
        page_number: int,
        page_size: int,
        addresses: AbstractSet[Address],
        token_addresses: AbstractSet[Address],
    ) -> dict[str, Any]:
        return {
            "pageNumber": page_number,
            "pageSize": page_size,
            "direction": _DIRECTION_DESC,
            "addresses": codec.addresses_to_payload(addresses),
            "tokenAddresses": codec.addresses_to_payload(token_addresses),
        }

    def _bulk_page(
        self,
        endpoint: str,
        path: str,
        body: dict[str, Any],
        convert: Callable[[Any, int, int], Page[T]],
    ) -> Page[T]:
        payload = self._read(endpoint, "POST", path, json=body)
        return convert(payload, body["pageNumber"], body["pageSize"])

    # ------------------------------------------------------------------
    # Bulk feeds

    def get_account_balances(
        self,
        page_number: int,
        page_size: int,
        addresses: AbstractSet[Address],
        token_addresses: AbstractSet[Address],
    ) -> Page[AccountBalance]:
        body = self._bulk_body(page_number, page_size, addresses, token_addresses)
        body.pop("direction")
        return self._bulk_page(
            "account_balance_bulk", "/api/v1/account-balance/page/bulk", body, codec.balance_page
        )

    def get_pending_transfers(
        self,
        page_number: int,
        page_size: int,
        addresses: AbstractSet[Address],
        token_addresses: AbstractSet[Address],
        transfer_type: TransferType | None = None,
    ) -> Page[PendingTransfer]:
        body = self._bulk_body(page_number, page_size, addresses, token_addresses)
        if transfer_type is not None:
            body["transferType"] = transfer_type.value
        return self._bulk_page(
            "mem_transfer_bulk", "/api/v1/mem-transfer/page/bulk", body, codec.pending_page
        )

    def get_confirmed_transfers(
        self,
        page_number: int,
        page_size: int,
        addresses: AbstractSet[Address],
        token_addresses: AbstractSet[Address],
        transfer_type: TransferType | None = None,
    ) -> Page[ConfirmedTransfer]:
        body = self._bulk_body(page_number, page_size, addresses, token_addresses)
        if transfer_type is not None:
            body["type"] = transfer_type.value
        return self._bulk_page(
            "transfer_bulk", "/api/v1/transfer/page/bulk", body, codec.confirmed_page
        )

    # ------------------------------------------------------------------
    # Chain state

    def get_latest_block_height(self) -> int | None:
        payload = self._read("latest_block_height", "GET", "/api/v1/blockchain/latest-block-height")
        return codec.to_int(payload)

    def get_account_summary(self, address: Address) -> AccountSummary:
        payload = self._read(
            "account_summary", "GET", f"/api/v1/blockchain/account-summary/{address}"
        )
        return codec.account_summary_from_payload(payload or {}, address)

    def get_all_tokens(self) -> list[Token]:
        payload = self._read("all_tokens", "GET", "/api/v1/blockchain/tokens")
        return codec.tokens_from_state_map(payload)

    def get_token(self, address: Address) -> Token | None:
        try:
            payload = self._read("token_by_address", "GET", f"/api/v1/token/{address}")
        except NodeResponseError as exc:
            if exc.node_status == 404:
                return None
            raise
        if not payload:
            return None
        return codec.token_from_payload(payload)

    def get_recommended_fees(self) -> RecommendedFees | None:
        payload = self._read("recommended_fees", "GET", "/api/v1/mempool/recommended-fees")
        return codec.recommended_fees_from_payload(payload)

    def get_node_info(self) -> NodeInfo:
        payload = self._read("node_info", "GET", "/api/v1/node-info")
        return codec.node_info_from_payload(payload)

    # ------------------------------------------------------------------
    # Writes

    def submit_transaction(self, hex_data: str) -> MempoolResult:
        # submission is not idempotent: a single attempt, whatever the policy
        payload = call_with_retry(
            lambda: self._send(
                "submit_tx",
                "POST",
                "/api/v1/mempool/submit-tx",
                json={"rawTxDataInHex": hex_data},
            ),
            NO_RETRY,
            endpoint="submit_tx",
        )
        try:
            return codec.mempool_result_from_payload(payload)
        except ValueError as exc:
            # the node answered; it may already hold the transaction
            raise NodeResponseError(
                "node returned no usable mempool status for submit_tx",
                node_status=200,
                endpoint="submit_tx",
            ) from exc


__all__ = ["NodeClient", "retry_policy_from_config"]
