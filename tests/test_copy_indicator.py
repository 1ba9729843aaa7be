import asyncio

from cliphistory.services import AsyncioScheduler, CopiedIndicator


def test_mark_lasts_for_the_duration(scheduler):
    indicator = CopiedIndicator(duration=2.0, scheduler=scheduler)
    indicator.mark("a")

    scheduler.advance(1.9)
    assert indicator.is_copied("a")

    scheduler.advance(0.2)
    assert indicator.current_id is None


def test_second_copy_is_not_cleared_by_first_timer(scheduler):
    indicator = CopiedIndicator(duration=2.0, scheduler=scheduler)
    indicator.mark("a")
    scheduler.advance(1.0)
    indicator.mark("b")

    scheduler.advance(1.5)
    assert indicator.current_id == "b"
    assert not indicator.is_copied("a")

    scheduler.advance(0.6)
    assert indicator.current_id is None


def test_stale_timer_is_ignored_even_if_cancel_loses_the_race(racy_scheduler):
    scheduler = racy_scheduler
    indicator = CopiedIndicator(duration=2.0, scheduler=scheduler)
    indicator.mark("a")
    scheduler.advance(1.0)
    indicator.mark("b")

    scheduler.advance(1.5)
    assert indicator.current_id == "b"


def test_recopying_same_entry_restarts_the_timer(racy_scheduler):
    scheduler = racy_scheduler
    indicator = CopiedIndicator(duration=2.0, scheduler=scheduler)
    indicator.mark("a")
    scheduler.advance(1.5)
    indicator.mark("a")

    scheduler.advance(1.0)
    assert indicator.is_copied("a")
    scheduler.advance(1.1)
    assert indicator.current_id is None


def test_clear_removes_mark_and_timer(scheduler):
    indicator = CopiedIndicator(scheduler=scheduler)
    indicator.mark("a")
    indicator.clear()

    assert indicator.current_id is None
    assert all(handle.cancelled for handle in scheduler.pending)


def test_listeners_see_each_state(scheduler):
    seen = []
    indicator = CopiedIndicator(duration=2.0, scheduler=scheduler)
    indicator.add_listener(seen.append)

    indicator.mark("a")
    indicator.mark("b")
    scheduler.advance(3.0)

    assert seen == ["a", "b", None]


def test_asyncio_scheduler_resets_on_the_loop():
    async def scenario():
        indicator = CopiedIndicator(duration=0.05, scheduler=AsyncioScheduler())
        indicator.mark("a")
        await asyncio.sleep(0.02)
        indicator.mark("b")
        await asyncio.sleep(0.04)
        during = indicator.current_id
        await asyncio.sleep(0.05)
        return during, indicator.current_id

    during, after = asyncio.run(scenario())
    assert during == "b"
    assert after is None
