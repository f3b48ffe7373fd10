from __future__ import annotations

import pytest

from tests.fakes.fake_node import ALICE, BOB, TOKEN, FakeNode, make_pending
from wallet_core.node.models import ZERO_ADDRESS, AccountBalance, Page
from wallet_core.wallet.balances import (
    BalanceReconciler,
    adjust_balance,
    collect_all_pages,
    pending_outgoing_sum,
)


def _balance(amount: int, *, address: str = ALICE, token: str = ZERO_ADDRESS) -> AccountBalance:
    return AccountBalance(address=address, token_address=token, amount=amount, updated_at_block_height=90)


def test_pending_transfer_and_fee_are_deducted_from_native_balance() -> None:
    node = FakeNode(
        balances=[_balance(100)],
        pending=[make_pending(1, amount=30, fee=2)],
    )

    result = BalanceReconciler(node).reconcile(frozenset({ALICE}), frozenset({ZERO_ADDRESS}))

    assert [row.amount for row in result] == [68]
    assert result[0].updated_at_block_height == 90


def test_balance_without_pending_is_returned_untouched() -> None:
    original = _balance(100)
    node = FakeNode(balances=[original])

    result = BalanceReconciler(node).reconcile(frozenset({ALICE}), frozenset({ZERO_ADDRESS}))

    assert result == [original]
    assert result[0] is original


def test_adjusted_balance_is_clamped_at_zero() -> None:
    node = FakeNode(
        balances=[_balance(10)],
        pending=[make_pending(1, amount=30, fee=5), make_pending(2, amount=1, fee=1)],
    )

    result = BalanceReconciler(node).reconcile(frozenset({ALICE}), frozenset({ZERO_ADDRESS}))

    assert result[0].amount == 0


def test_incoming_pending_transfers_do_not_reduce_balance() -> None:
    node = FakeNode(
        balances=[_balance(100)],
        pending=[make_pending(1, sender=BOB, recipient=ALICE, amount=40, fee=3)],
    )

    result = BalanceReconciler(node).reconcile(frozenset({ALICE}), frozenset({ZERO_ADDRESS}))

    assert result[0].amount == 100


def test_token_transfer_fee_is_charged_to_native_balance_only() -> None:
    native = _balance(100)
    token = _balance(50, token=TOKEN)
    transfer = make_pending(1, token=TOKEN, amount=20, fee=4)

    assert pending_outgoing_sum(token, [transfer]) == 20
    assert pending_outgoing_sum(native, [transfer]) == 4
    assert adjust_balance(token, [transfer]).amount == 30
    assert adjust_balance(native, [transfer]).amount == 96


def test_native_transfer_does_not_touch_token_balance() -> None:
    token = _balance(50, token=TOKEN)
    transfer = make_pending(1, amount=20, fee=4)

    assert adjust_balance(token, [transfer]) is token


def test_each_address_is_adjusted_by_its_own_pending_transfers() -> None:
    node = FakeNode(
        balances=[_balance(100, address=ALICE), _balance(100, address=BOB)],
        pending=[make_pending(1, sender=BOB, recipient=ALICE, amount=10, fee=1)],
    )

    result = BalanceReconciler(node).reconcile(frozenset({ALICE, BOB}), frozenset({ZERO_ADDRESS}))

    assert [(row.address, row.amount) for row in result] == [(ALICE, 100), (BOB, 89)]


def test_reconcile_pages_through_both_feeds() -> None:
    balances = [_balance(1000, address="0x" + f"{index:040x}") for index in range(1, 6)]
    pending = [make_pending(index, sender=balances[index % 5].address, amount=1, fee=0) for index in range(7)]
    node = FakeNode(balances=balances, pending=pending)
    addresses = frozenset(balance.address for balance in balances)

    result = BalanceReconciler(node, page_size=2).reconcile(addresses, frozenset({ZERO_ADDRESS}))

    assert [row.address for row in result] == [balance.address for balance in balances]
    assert sum(1000 - row.amount for row in result) == 7
    assert [call[1] for call in node.calls_to("balances")] == [0, 1, 2]
    assert [call[1] for call in node.calls_to("pending")] == [0, 1, 2, 3]


def test_pending_feed_is_read_without_transfer_type_filter() -> None:
    node = FakeNode(balances=[_balance(100)], pending=[make_pending(1, amount=5, fee=0)])
    seen: list = []
    original = node.get_pending_transfers

    def _spy(page_number, page_size, addresses, token_addresses, transfer_type=None):
        seen.append(transfer_type)
        return original(page_number, page_size, addresses, token_addresses, transfer_type)

    node.get_pending_transfers = _spy  # type: ignore[method-assign]
    BalanceReconciler(node).reconcile(frozenset({ALICE}), frozenset({ZERO_ADDRESS}))

    assert seen == [None]


def test_collect_all_pages_stops_on_missing_page() -> None:
    calls: list[int] = []

    def fetch(page_number: int, page_size: int):
        calls.append(page_number)
        if page_number == 0:
            return Page(items=(1, 2), page_number=0, page_size=2, total_elements=6)
        return None

    assert collect_all_pages(fetch, 2) == [1, 2]
    assert calls == [0, 1]


def test_collect_all_pages_stops_when_node_serves_fewer_rows_than_reported() -> None:
    calls: list[int] = []

    def fetch(page_number: int, page_size: int):
        calls.append(page_number)
        if page_number == 0:
            return Page(items=("a",), page_number=0, page_size=1, total_elements=50)
        return Page.empty(page_number, page_size)

    assert collect_all_pages(fetch, 1) == ["a"]
    assert calls == [0, 1]


def test_collect_all_pages_handles_empty_feed() -> None:
    assert collect_all_pages(lambda number, size: Page.empty(number, size), 10) == []


def test_reconcile_is_repeatable() -> None:
    node = FakeNode(
        balances=[_balance(100), _balance(40, token=TOKEN)],
        pending=[make_pending(1, amount=30, fee=2), make_pending(2, token=TOKEN, amount=5, fee=1)],
    )
    reconciler = BalanceReconciler(node)
    tokens = frozenset({ZERO_ADDRESS, TOKEN})

    first = reconciler.reconcile(frozenset({ALICE}), tokens)
    second = reconciler.reconcile(frozenset({ALICE}), tokens)

    assert first == second
    assert [row.amount for row in first] == [67, 35]


@pytest.mark.parametrize("amount,pending_amount,fee", [(0, 0, 0), (5, 10, 10), (1, 1, 0), (999, 1000, 1)])
def test_reconciled_amount_is_never_negative(amount: int, pending_amount: int, fee: int) -> None:
    adjusted = adjust_balance(_balance(amount), [make_pending(1, amount=pending_amount, fee=fee)])
    assert adjusted.amount >= 0


def test_reconciler_rejects_non_positive_page_size() -> None:
    with pytest.raises(ValueError):
        BalanceReconciler(FakeNode(), page_size=0)
