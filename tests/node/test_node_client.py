from __future__ import annotations

import json

import httpx
import pytest

from wallet_core.config.schema import NodeConfig
from wallet_core.errors import NodeResponseError, NodeUnavailableError
from wallet_core.node.client import NodeClient
from wallet_core.node.models import ZERO_ADDRESS, MempoolAddResult, TransferType
from wallet_core.node.retry import RetryPolicy

ALICE = "0x" + "a1" * 20
HASH = "0x" + "cd" * 32


class _Recorder:
    def __init__(self, handler) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def _client(handler, *, api_key: str | None = None, sleeps: list[float] | None = None) -> tuple[NodeClient, _Recorder]:
    recorder = _Recorder(handler)
    sink = sleeps if sleeps is not None else []
    client = NodeClient(
        NodeConfig(base_url="http://node.test/", api_key=api_key),
        retry=RetryPolicy(sleep=sink.append),
        transport=httpx.MockTransport(recorder),
    )
    return client, recorder


def test_pending_request_body_carries_filters_and_paging() -> None:
    client, recorder = _client(lambda request: httpx.Response(200, json={"list": [], "totalElements": 0}))

    client.get_pending_transfers(2, 25, {ALICE.upper().replace("0X", "0x")}, {ZERO_ADDRESS}, TransferType.MINT)

    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/v1/mem-transfer/page/bulk"
    assert json.loads(request.content) == {
        "pageNumber": 2,
        "pageSize": 25,
        "direction": "DESC",
        "addresses": [ALICE],
        "tokenAddresses": [ZERO_ADDRESS],
        "transferType": "MINT",
    }


def test_confirmed_request_uses_type_key_and_balances_omit_direction() -> None:
    client, recorder = _client(lambda request: httpx.Response(200, json={"list": None}))

    client.get_confirmed_transfers(0, 10, {ALICE}, set(), TransferType.BURN)
    client.get_account_balances(0, 100, {ALICE}, {ZERO_ADDRESS})

    confirmed_body = json.loads(recorder.requests[0].content)
    balances_body = json.loads(recorder.requests[1].content)
    assert recorder.requests[0].url.path == "/api/v1/transfer/page/bulk"
    assert confirmed_body["type"] == "BURN"
    assert confirmed_body["tokenAddresses"] == []
    assert "direction" not in balances_body


def test_null_list_is_empty_page() -> None:
    client, _ = _client(lambda request: httpx.Response(200, json={"list": None, "totalElements": 5}))

    page = client.get_confirmed_transfers(1, 10, {ALICE}, set())

    assert page.items == ()
    assert page.total_elements == 0


def test_empty_body_is_empty_page() -> None:
    client, _ = _client(lambda request: httpx.Response(200))

    assert client.get_account_balances(0, 10, {ALICE}, {ZERO_ADDRESS}).total_elements == 0


def test_api_key_header_is_sent() -> None:
    client, recorder = _client(lambda request: httpx.Response(200, json=42), api_key="secret")

    assert client.get_latest_block_height() == 42
    assert recorder.requests[0].headers["X-API-Key"] == "secret"
    assert recorder.requests[0].headers["User-Agent"] == "wallet-core"


def test_transport_errors_are_retried_then_surface_as_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    sleeps: list[float] = []
    client, recorder = _client(handler, sleeps=sleeps)

    with pytest.raises(NodeUnavailableError):
        client.get_latest_block_height()

    assert len(recorder.requests) == 3
    assert sleeps == [0.5, 0.5]


def test_error_status_is_not_retried() -> None:
    client, recorder = _client(lambda request: httpx.Response(500, json={"error": "boom"}))

    with pytest.raises(NodeResponseError) as excinfo:
        client.get_pending_transfers(0, 10, {ALICE}, set())

    assert excinfo.value.node_status == 500
    assert len(recorder.requests) == 1


def test_unknown_token_is_none() -> None:
    client, recorder = _client(lambda request: httpx.Response(404))

    assert client.get_token(ALICE) is None
    assert recorder.requests[0].url.path == f"/api/v1/token/{ALICE}"


def test_account_summary_reads_next_nonce() -> None:
    client, _ = _client(lambda request: httpx.Response(200, json={"nextNonce": 7, "balance": "100"}))

    summary = client.get_account_summary(ALICE)

    assert summary.next_nonce == 7
    assert summary.balance == 100


def test_submit_transaction_is_never_retried() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    client, recorder = _client(handler)

    with pytest.raises(NodeUnavailableError):
        client.submit_transaction("0xdeadbeef")

    assert len(recorder.requests) == 1


def test_submit_transaction_posts_raw_hex() -> None:
    client, recorder = _client(
        lambda request: httpx.Response(200, json={"status": "SUCCESS", "txHash": HASH})
    )

    result = client.submit_transaction("0xdeadbeef")

    assert json.loads(recorder.requests[0].content) == {"rawTxDataInHex": "0xdeadbeef"}
    assert result.status is MempoolAddResult.SUCCESS
    assert result.tx_hash == HASH


@pytest.mark.parametrize("response", [httpx.Response(200), httpx.Response(200, json={"txHash": HASH})])
def test_submit_without_status_is_a_node_response_error(response: httpx.Response) -> None:
    client, recorder = _client(lambda request: response)

    with pytest.raises(NodeResponseError) as excinfo:
        client.submit_transaction("0xdeadbeef")

    assert excinfo.value.endpoint == "submit_tx"
    assert len(recorder.requests) == 1
