from link_toolkit.core.scheduling import Debouncer, VirtualScheduler


class TkLikeWidget:
    """Mimics Tk: cancelling an id that already ran raises."""

    def __init__(self):
        self.clock = VirtualScheduler()
        self.fired = set()

    def after(self, ms, func):
        holder = {}

        def run():
            self.fired.add(holder["id"])
            func()

        holder["id"] = self.clock.after(ms, run)
        return holder["id"]

    def after_cancel(self, handle):
        if handle in self.fired:
            raise ValueError("invalid command name")
        self.clock.after_cancel(handle)


def test_debouncer_runs_once_after_quiet_window(scheduler):
    calls = []
    debouncer = Debouncer(scheduler, 100, lambda: calls.append(scheduler.now))

    debouncer.trigger()
    scheduler.advance(80)
    debouncer.trigger()
    scheduler.advance(80)
    assert calls == []
    assert debouncer.pending

    scheduler.advance(20)
    assert calls == [180]
    assert not debouncer.pending


def test_debouncer_cancel_and_flush(scheduler):
    calls = []
    debouncer = Debouncer(scheduler, 100, lambda: calls.append("run"))

    debouncer.trigger()
    debouncer.cancel()
    assert not debouncer.pending
    scheduler.advance(200)
    assert calls == []

    debouncer.flush()
    assert calls == []

    debouncer.trigger()
    debouncer.flush()
    assert calls == ["run"]
    assert scheduler.pending_count() == 0


def test_negative_delay_is_clamped(scheduler):
    calls = []
    debouncer = Debouncer(scheduler, -5, lambda: calls.append(1))

    debouncer.trigger()
    scheduler.run_pending()

    assert calls == [1]


def test_cancelling_stale_tk_handle_is_tolerated():
    widget = TkLikeWidget()
    calls = []
    debouncer = Debouncer(widget, 10, lambda: calls.append(1))

    debouncer.trigger()
    handle = debouncer._handle
    widget.clock.advance(10)
    # Simulate a debouncer that still believes the timer is armed
    debouncer._handle = handle
    debouncer.trigger()
    widget.clock.advance(10)

    assert calls == [1, 1]


def test_virtual_scheduler_orders_by_due_time_then_insertion():
    clock = VirtualScheduler()
    seen = []
    clock.after(20, lambda: seen.append("b"))
    clock.after(10, lambda: seen.append("a"))
    clock.after(20, lambda: seen.append("c"))

    assert clock.advance(20) == 3
    assert seen == ["a", "b", "c"]
    assert clock.now == 20


def test_virtual_scheduler_runs_callbacks_scheduled_inside_window():
    clock = VirtualScheduler()
    seen = []
    clock.after(5, lambda: clock.after(5, lambda: seen.append(clock.now)))

    clock.advance(10)

    assert seen == [10]


def test_virtual_scheduler_cancel():
    clock = VirtualScheduler()
    seen = []
    handle = clock.after(5, lambda: seen.append(1))

    clock.after_cancel(handle)

    assert clock.pending_count() == 0
    assert clock.advance(10) == 0
    assert seen == []
