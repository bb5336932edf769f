"""Rollback on failure, reentrancy and event delivery."""

from __future__ import annotations

import pytest

from cpswap.core import Event
from cpswap.errors import PoolArithmeticError, TransferFailedError
from cpswap.kernels.python.cpmm_math import quote_output_for_input


DEADLINE = 2_000


class _Refusing:
    """Makes the token's outgoing transfers report failure while armed."""

    def __init__(self, token):
        self.token = token
        self.armed = False
        self._transfer = token.transfer
        token.transfer = self.transfer

    def transfer(self, to, amount):
        if self.armed:
            return False
        return self._transfer(to, amount)


class TestRollback:
    def test_missing_allowance_rolls_back(self, h):
        h.seed(1000, 1000)
        h.token_a.approve("alice", "pool", 0)
        events_before = h.ex.events

        with pytest.raises(TransferFailedError):
            h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)

        assert h.ex.get_reserves() == (1000, 1000)
        assert h.ex.get_swap_count("alice") == 0
        assert h.ex.events == events_before

    def test_refused_output_transfer_restores_input_ledger(self, h):
        h.seed(1000, 1000)
        refusing = _Refusing(h.token_b)
        refusing.armed = True
        before = h.balances("alice")
        pool_before = h.balances("pool")

        with pytest.raises(TransferFailedError):
            h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)

        # The input leg had already moved; it is undone with the rest.
        assert h.balances("alice") == before
        assert h.balances("pool") == pool_before
        assert h.token_a.allowance("alice", "pool") > 0
        assert h.ex.get_reserves() == (1000, 1000)

    def test_failed_deposit_keeps_shares(self, h):
        h.seed(1000, 1000)
        h.token_b.approve("alice", "pool", 0)
        with pytest.raises(TransferFailedError):
            h.ex.deposit("alice", 100, 100, 0, 10**9, DEADLINE)
        assert h.ex.get_shares("alice") == 0
        assert h.ex.get_total_shares() == 1000
        assert h.balances("pool") == (1000, 1000)

    def test_failed_reward_transfer_rolls_back_counter_and_budget(self, make_harness):
        h = make_harness(swap_count_max=1, reward_amount=5)
        h.seed(1000, 1000)
        h.ex.fund_rewards("admin", "B", 10, DEADLINE)
        original = h.token_b.transfer
        calls = []

        def transfer(to, amount):
            calls.append(amount)
            # principal goes through, reward leg is refused
            return len(calls) == 1 and original(to, amount)

        h.token_b.transfer = transfer
        with pytest.raises(TransferFailedError):
            h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)

        assert calls == [90, 5]
        assert h.ex.get_reward_budget("B") == 10
        assert h.ex.get_reserves() == (1000, 1000)
        assert h.balances("pool") == (1000, 1010)


class TestReentrancy:
    def test_reentrant_swap_sees_committed_state(self, h):
        h.seed(1000, 1000)
        seen = {}

        def hook(kind, sender, to, amount):
            if to != "alice" or seen:
                return
            seen["reserves"] = h.ex.get_reserves()
            seen["count"] = h.ex.get_swap_count("alice")
            seen["inner_out"] = h.ex.swap_exact_input("bob", "A", 50, "B", 0, DEADLINE)

        h.token_b.on_transfer = hook
        out = h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)

        assert out == 90
        assert seen["reserves"] == (1100, 910)
        assert seen["count"] == 1
        assert seen["inner_out"] == quote_output_for_input(50, 1100, 910, 997, 1000)
        assert h.ex.get_reserves() == (1150, 910 - seen["inner_out"])
        assert h.balances("pool") == h.ex.get_reserves()

        swaps = [e for e in h.ex.events if e.event is Event.SWAP]
        assert [e.actor for e in swaps] == ["bob", "alice"]

    def test_failure_inside_callback_rolls_back_everything(self, h):
        h.seed(1000, 1000)

        def hook(kind, sender, to, amount):
            if to == "alice":
                h.ex.swap_exact_input("bob", "A", 50, "B", 0, DEADLINE)
                raise TransferFailedError("receiver rejected", to=to)

        h.token_b.on_transfer = hook
        with pytest.raises(TransferFailedError):
            h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)

        assert h.ex.get_reserves() == (1000, 1000)
        assert h.ex.get_swap_count("bob") == 0
        assert h.balances("pool") == (1000, 1000)
        assert [e.event for e in h.ex.events] == [Event.LIQUIDITY_ADDED]


class TestEvents:
    def test_swap_event_carries_committed_values(self, h):
        h.seed(1000, 1000)
        h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)
        ev = h.ex.events[-1]
        assert ev.event is Event.SWAP
        assert ev.actor == "alice"
        assert dict(ev.data) == {
            "kind": "exact_input",
            "asset_in": "A",
            "asset_out": "B",
            "amount_in": 100,
            "amount_out": 90,
            "reserve_a": 1100,
            "reserve_b": 910,
        }

    def test_subscribers_see_events_in_order(self, h):
        got = []
        h.ex.subscribe(got.append)
        h.seed(1000, 1000)
        h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)
        h.ex.withdraw("lp", 100, 0, 0, DEADLINE)
        assert [e.event for e in got] == [Event.LIQUIDITY_ADDED, Event.SWAP, Event.LIQUIDITY_REMOVED]
        assert tuple(got) == h.ex.events

    def test_failed_operation_emits_nothing(self, h):
        got = []
        h.ex.subscribe(got.append)
        with pytest.raises(PoolArithmeticError):
            h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)
        assert got == []
        assert h.ex.events == ()

    def test_raising_subscriber_aborts_operation(self, h):
        h.seed(1000, 1000)

        def veto(record):
            raise RuntimeError("subscriber failed")

        h.ex.subscribe(veto)
        with pytest.raises(RuntimeError):
            h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)
        assert h.ex.get_reserves() == (1000, 1000)
        assert len(h.ex.events) == 1

    def test_subscribers_never_see_rolled_back_nested_records(self, h):
        h.seed(1000, 1000)
        got = []
        h.ex.subscribe(got.append)

        def hook(kind, sender, to, amount):
            if to == "alice":
                h.ex.swap_exact_input("bob", "A", 50, "B", 0, DEADLINE)
                raise TransferFailedError("receiver rejected", to=to)

        h.token_b.on_transfer = hook
        with pytest.raises(TransferFailedError):
            h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)

        assert got == []
        assert [e.event for e in h.ex.events] == [Event.LIQUIDITY_ADDED]

    def test_nested_records_delivered_when_outer_operation_completes(self, h):
        h.seed(1000, 1000)
        got = []
        h.ex.subscribe(got.append)
        seen_during = []

        def hook(kind, sender, to, amount):
            if to == "alice" and not seen_during:
                h.ex.swap_exact_input("bob", "A", 50, "B", 0, DEADLINE)
                seen_during.append(list(got))

        h.token_b.on_transfer = hook
        h.ex.swap_exact_input("alice", "A", 100, "B", 0, DEADLINE)

        assert seen_during == [[]]
        assert [(e.event, e.actor) for e in got] == [(Event.SWAP, "bob"), (Event.SWAP, "alice")]
