from vocab_drill.timer import AnswerTimer


def make_timer(scheduler, duration=3):
    events = {"ticks": [], "timeouts": 0}

    def on_timeout():
        events["timeouts"] += 1

    timer = AnswerTimer(
        scheduler,
        on_timeout=on_timeout,
        on_tick=events["ticks"].append,
        duration=duration,
        interval=1.0,
    )
    return timer, events


def test_start_sets_remaining_and_arms(scheduler):
    timer, _ = make_timer(scheduler)
    timer.start()
    assert timer.armed
    assert timer.remaining == 3


def test_counts_down_once_per_tick(scheduler):
    timer, events = make_timer(scheduler)
    timer.start()
    scheduler.advance(1)
    assert timer.remaining == 2
    scheduler.advance(1)
    assert events["ticks"] == [2, 1]


def test_timeout_fires_exactly_once(scheduler):
    timer, events = make_timer(scheduler)
    timer.start()
    scheduler.advance(3)
    assert events["timeouts"] == 1
    assert timer.remaining == 0
    assert not timer.armed
    scheduler.advance(10)
    assert events["timeouts"] == 1
    assert events["ticks"] == [2, 1, 0]
    assert scheduler.pending == 0


def test_stop_cancels_pending_tick(scheduler):
    timer, events = make_timer(scheduler)
    timer.start()
    scheduler.advance(1)
    timer.stop()
    scheduler.advance(10)
    assert events["ticks"] == [2]
    assert events["timeouts"] == 0
    assert timer.remaining == 2


def test_reset_restores_duration_without_arming(scheduler):
    timer, events = make_timer(scheduler)
    timer.start()
    scheduler.advance(2)
    timer.reset()
    assert timer.remaining == 3
    assert not timer.armed
    scheduler.advance(10)
    assert events["timeouts"] == 0


def test_restart_after_timeout(scheduler):
    timer, events = make_timer(scheduler)
    timer.start()
    scheduler.advance(3)
    timer.start()
    scheduler.advance(3)
    assert events["timeouts"] == 2


def test_restart_does_not_double_tick(scheduler):
    timer, events = make_timer(scheduler)
    timer.start()
    scheduler.advance(0.5)
    timer.start()
    scheduler.advance(1)
    assert events["ticks"] == [2]
