from __future__ import annotations

from imagefocus.deeplink import is_slide_fragment, parse_slide_fragment, slide_fragment
from imagefocus.environment import Environment
from imagefocus.events import NotificationCenter
from imagefocus.logging import Logger
from imagefocus.scheduler import ManualClock, Scheduler


def test_handlers_run_in_order_and_receive_a_copy():
    bus = NotificationCenter()
    seen = []
    info = {"n": 1}

    def first(payload):
        payload["n"] = 2
        seen.append("first")

    bus.add_handler("evt", first)
    bus.add_handler("evt", lambda payload: seen.append(("second", payload["n"])))
    bus.fire("evt", info)
    assert seen == ["first", ("second", 2)]
    assert info == {"n": 1}


def test_failing_handler_does_not_stop_the_others():
    bus = NotificationCenter()
    seen = []

    def broken(payload):
        raise RuntimeError("boom")

    bus.add_handler("evt", broken)
    bus.add_handler("evt", lambda payload: seen.append("ok"))
    bus.fire("evt")
    assert seen == ["ok"]


def test_once_handlers_and_removal():
    bus = NotificationCenter()
    seen = []

    def handler(payload):
        seen.append(1)

    bus.add_handler("evt", handler, once=True)
    bus.add_handler("evt", handler)  # duplicate is ignored
    assert bus.handler_count("evt") == 1
    bus.fire("evt")
    bus.fire("evt")
    assert seen == [1]
    assert bus.remove_handler("evt", handler) is False


def test_scheduler_runs_due_callbacks_in_time_order():
    clock = ManualClock()
    sched = Scheduler(clock)
    ran = []
    sched.call_later(2.0, lambda: ran.append("late"))
    sched.call_later(1.0, lambda: ran.append("early"))
    sched.call_soon(lambda: ran.append("soon"))

    assert sched.run_due() == 1
    clock.advance(2.0)
    assert sched.run_due() == 2
    assert ran == ["soon", "early", "late"]
    assert sched.pending == 0


def test_cancelled_callbacks_do_not_run():
    clock = ManualClock()
    sched = Scheduler(clock)
    ran = []
    handle = sched.call_later(1.0, lambda: ran.append("x"))
    sched.cancel(handle)
    sched.cancel(None)
    clock.advance(5.0)
    assert sched.run_due() == 0
    assert ran == []


def test_callbacks_scheduled_while_running_wait_for_next_pump():
    sched = Scheduler(ManualClock())
    ran = []
    sched.call_soon(lambda: sched.call_soon(lambda: ran.append("inner")))
    sched.run_due()
    assert ran == []
    sched.run_due()
    assert ran == ["inner"]


def test_environment_defers_callbacks_until_page_loaded():
    env = Environment(page_loaded=False)
    ran = []
    env.do_when_page_loaded(lambda: ran.append("a"))
    assert ran == []
    env.mark_page_loaded()
    env.mark_page_loaded()
    assert ran == ["a"]
    env.do_when_page_loaded(lambda: ran.append("b"))
    assert ran == ["a", "b"]


def test_slide_fragments():
    assert slide_fragment(3) == "#if_slide_3"
    assert parse_slide_fragment("#if_slide_12") == 12
    assert parse_slide_fragment("#if_slide_") is None
    assert parse_slide_fragment("#if_slide_2x") is None
    assert parse_slide_fragment("#section") is None
    assert is_slide_fragment("#if_slide_x")
    assert not is_slide_fragment("#intro")


def test_logger_drops_messages_above_its_level(capsys):
    logger = Logger(level=1)
    logger.log("shown")
    logger.log("hidden", level=2)
    for _ in range(7):
        logger.increment_frame()
    logger.log("counted")
    out = capsys.readouterr().out
    assert "shown" in out
    assert "hidden" not in out
    assert "F000007] counted" in out
