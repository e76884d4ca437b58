"""Tests for the background persistence writer."""

import asyncio

from family_legacy.state.writer import PersistenceWriter


class TestInline:
    """Without an event loop jobs run immediately."""

    def test_success(self):
        writer = PersistenceWriter()
        done = []
        writer.submit("ok", lambda: None, on_success=lambda: done.append("ok"))
        assert done == ["ok"]
        assert writer.idle

    def test_failure_is_reported_not_raised(self):
        writer = PersistenceWriter()
        errors = []

        def job():
            raise RuntimeError("boom")

        writer.submit("bad", job, on_failure=errors.append)
        assert isinstance(errors[0], RuntimeError)
        assert writer.idle

    def test_call_soon_without_loop(self):
        calls = []
        PersistenceWriter().call_soon(calls.append, 1)
        assert calls == [1]


class TestThreaded:
    """Inside a running loop jobs go to the worker thread."""

    def test_jobs_run_in_order_off_loop(self):
        async def scenario():
            writer = PersistenceWriter()
            order = []
            writer.submit("first", lambda: order.append(1))
            writer.submit("second", lambda: order.append(2), on_success=lambda: order.append("done"))
            assert writer.pending == 2
            while not writer.idle:
                await asyncio.sleep(0.01)
            return order

        assert asyncio.run(scenario()) == [1, 2, "done"]

    def test_failure_callback_on_loop(self):
        async def scenario():
            writer = PersistenceWriter()
            errors = []
            loop = asyncio.get_running_loop()
            seen_loop = []

            def job():
                raise ValueError("nope")

            def failed(error):
                errors.append(error)
                seen_loop.append(asyncio.get_running_loop() is loop)

            writer.submit("bad", job, on_failure=failed)
            while not writer.idle:
                await asyncio.sleep(0.01)
            return errors, seen_loop

        errors, seen_loop = asyncio.run(scenario())
        assert isinstance(errors[0], ValueError)
        assert seen_loop == [True]
