"""Unit tests for UiContext."""

import threading

import pytest

from saysomething.ui.context import UiContext


@pytest.mark.unit
class TestUiContext:
    """Test cases for UiContext class."""

    def test_post_runs_on_process_pending(self, ui_context):
        calls = []
        ui_context.post(calls.append, "a")
        ui_context.post(calls.append, "b")

        assert calls == []
        assert ui_context.process_pending() == 2
        assert calls == ["a", "b"]

    def test_post_from_other_thread_runs_on_loop_thread(self, ui_context):
        ran_on = []

        def callback():
            ran_on.append(threading.current_thread())

        worker = threading.Thread(target=ui_context.post, args=(callback,))
        worker.start()
        worker.join()
        ui_context.process_pending()

        assert ran_on == [threading.current_thread()]

    def test_call_later_waits_for_clock(self, ui_context, fake_clock):
        calls = []
        ui_context.call_later(0.2, calls.append, 1)

        fake_clock.advance(0.1)
        ui_context.process_pending()
        assert calls == []

        fake_clock.advance(0.1)
        ui_context.process_pending()
        assert calls == [1]

    def test_timers_run_in_deadline_order(self, ui_context, fake_clock):
        calls = []
        ui_context.call_later(0.3, calls.append, "late")
        ui_context.call_later(0.1, calls.append, "early")

        fake_clock.advance(1.0)
        ui_context.process_pending()

        assert calls == ["early", "late"]

    def test_cancelled_timer_does_not_run(self, ui_context, fake_clock):
        calls = []
        handle = ui_context.call_later(0.1, calls.append, 1)
        handle.cancel()

        fake_clock.advance(1.0)
        ui_context.process_pending()

        assert calls == []

    def test_callback_error_does_not_stop_processing(self, ui_context):
        calls = []

        def broken():
            raise RuntimeError("boom")

        ui_context.post(broken)
        ui_context.post(calls.append, "after")
        ui_context.process_pending()

        assert calls == ["after"]

    def test_run_until_returns_when_predicate_holds(self, ui_context):
        calls = []
        threading.Timer(0.05, ui_context.post, args=(calls.append, 1)).start()

        assert ui_context.run_until(lambda: calls, timeout=2.0) is True
        assert calls == [1]

    def test_run_until_times_out(self, ui_context):
        assert ui_context.run_until(lambda: False, timeout=0.1) is False

    def test_run_forever_stops(self):
        context = UiContext()
        calls = []
        context.post(calls.append, "ran")
        threading.Timer(0.05, context.stop).start()

        context.run_forever(poll_interval=0.01)

        assert calls == ["ran"]
