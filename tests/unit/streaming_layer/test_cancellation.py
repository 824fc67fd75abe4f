"""
Unit Tests for Cancellation Tokens and Request Slots
"""

import asyncio

import pytest

from spanlens.streaming.cancellation import CancellationToken, RequestLifecycleManager, RequestSlot


@pytest.mark.unit
class TestCancellationToken:
    def test_cancel_runs_callbacks_once(self):
        token = CancellationToken("chat", 1)
        calls = []
        token.on_cancel(lambda: calls.append("a"))

        token.cancel()
        token.cancel()

        assert token.cancelled
        assert calls == ["a"]

    def test_callback_after_cancel_runs_immediately(self):
        token = CancellationToken()
        token.cancel()
        calls = []

        token.on_cancel(lambda: calls.append("late"))

        assert calls == ["late"]

    def test_failing_callback_does_not_stop_others(self):
        token = CancellationToken()
        calls = []

        def broken():
            raise RuntimeError("boom")

        token.on_cancel(broken)
        token.on_cancel(lambda: calls.append("ok"))
        token.cancel()

        assert calls == ["ok"]

    async def test_bind_task_cancels_task(self):
        token = CancellationToken()
        task = token.bind_task(asyncio.create_task(asyncio.sleep(10)))

        token.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    def test_repr(self):
        assert repr(CancellationToken("lookup", 3)) == (
            "CancellationToken(slot='lookup', generation=3, live)"
        )


@pytest.mark.unit
class TestRequestSlot:
    """Test supersession and the generation guard."""

    def test_begin_supersedes_previous(self):
        slot = RequestSlot("chat")

        first = slot.begin()
        second = slot.begin()

        assert first.cancelled
        assert not second.cancelled
        assert slot.generation == 2
        assert slot.current is second

    def test_is_current_only_for_latest_live_token(self):
        slot = RequestSlot("lookup")
        first = slot.begin()
        assert slot.is_current(first)

        second = slot.begin()

        assert not slot.is_current(first)
        assert slot.is_current(second)

    def test_cancel_leaves_slot_idle(self):
        slot = RequestSlot("lookup")
        token = slot.begin()

        slot.cancel()

        assert token.cancelled
        assert not slot.is_current(token)
        assert not slot.busy
        assert slot.current is None

    def test_release_only_affects_matching_token(self):
        slot = RequestSlot("chat")
        old = slot.begin()
        new = slot.begin()

        slot.release(old)
        assert slot.current is new

        slot.release(new)
        assert slot.current is None
        assert not new.cancelled

    def test_stale_token_from_same_generation_number_rejected(self):
        slot = RequestSlot("chat")
        slot.begin()
        forged = CancellationToken("chat", slot.generation)

        assert not slot.is_current(forged)

    async def test_start_runs_operation_bound_to_token(self):
        slot = RequestSlot("chat")
        started = asyncio.Event()

        async def operation(token):
            started.set()
            await asyncio.sleep(10)

        token, task = slot.start(operation)
        await started.wait()
        slot.begin()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert token.cancelled


@pytest.mark.unit
class TestRequestLifecycleManager:
    def test_slots_created_on_demand(self, lifecycle):
        assert lifecycle.slot("chat") is lifecycle.slot("chat")

    def test_slots_are_independent(self, lifecycle):
        chat = lifecycle.begin("chat")
        lookup = lifecycle.begin("lookup")

        lifecycle.begin("chat")

        assert chat.cancelled
        assert lifecycle.is_current("lookup", lookup)

    def test_cancel_all(self, lifecycle):
        tokens = [lifecycle.begin("chat"), lifecycle.begin("lookup")]

        lifecycle.cancel_all()

        assert all(token.cancelled for token in tokens)
        assert lifecycle.get_stats() == {
            "chat": {"generation": 1, "busy": False},
            "lookup": {"generation": 1, "busy": False},
        }

    def test_cancel_unknown_slot_is_noop(self):
        RequestLifecycleManager().cancel("missing")
