from __future__ import annotations

import datetime as dt
import unittest

from chronogrid.gesture import (
    AutoScroller,
    MonthDragMachine,
    Phase,
    ScrollContainer,
    TimeDragMachine,
    day_click_intent,
    day_index_from_x,
    slot_click_intent,
)
from chronogrid.model import CreateIntent, ViewportSpec
from chronogrid.util.tz import fixed_clock

DAY_VP = ViewportSpec(visible_hour_start=7, visible_hour_end=22, pixels_per_hour=64)
WEEK_VP = ViewportSpec(visible_hour_start=7, visible_hour_end=22, pixels_per_hour=64, header_offset_px=174)
TODAY = dt.datetime(2024, 6, 1, 8, 0)
D = dt.date(2024, 6, 10)


class ManualScheduler:
    """Deterministic scheduler: time only moves on ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._seq = 0
        self.jobs = {}

    def call_later(self, delay_s, fn):
        self._seq += 1
        self.jobs[self._seq] = [self.now + delay_s, None, fn]
        return self._seq

    def call_every(self, interval_s, fn):
        self._seq += 1
        self.jobs[self._seq] = [self.now + interval_s, interval_s, fn]
        return self._seq

    def cancel(self, handle):
        if handle is None:
            return
        self.jobs.pop(handle, None)

    def advance(self, seconds):
        end = self.now + seconds
        while True:
            due = sorted((j[0], h) for h, j in self.jobs.items() if j[0] <= end + 1e-9)
            if not due:
                break
            t, h = due[0]
            job = self.jobs[h]
            self.now = t
            if job[1] is None:
                del self.jobs[h]
            else:
                job[0] = t + job[1]
            job[2]()
        self.now = end


def _container(**kw) -> ScrollContainer:
    base = dict(top=0.0, height=600.0, scroll_top=0.0, scroll_height=960.0)
    base.update(kw)
    return ScrollContainer(**base)


class TestTimeDragContract(unittest.TestCase):
    def setUp(self) -> None:
        self.sched = ManualScheduler()
        self.scroller = AutoScroller(self.sched)
        self.m = TimeDragMachine(DAY_VP, view="day", clock=fixed_clock(TODAY), scroller=self.scroller)
        self.c = _container()

    def test_drag_emits_snapped_create_intent(self) -> None:
        self.assertTrue(self.m.pointer_down(D, 131.2, self.c))
        self.assertIs(self.m.phase, Phase.DRAGGING)
        self.assertTrue(self.m.pointer_move(D, 160, self.c))

        intent = self.m.pointer_up()
        self.assertEqual(
            intent,
            CreateIntent(date="2024-06-10", end_date="2024-06-10", source_view="day", start_time="09:00", end_time="09:30"),
        )
        assert intent is not None
        rec = intent.to_record()
        self.assertEqual((rec["date"], rec["startTime"], rec["endTime"]), ("2024-06-10", "09:00", "09:30"))
        self.assertIs(self.m.phase, Phase.IDLE)

    def test_reverse_drag_orders_range(self) -> None:
        self.m.pointer_down(D, 160, self.c)
        self.m.pointer_move(D, 128, self.c)
        intent = self.m.pointer_up()
        assert intent is not None
        self.assertEqual((intent.start_time, intent.end_time), ("09:00", "09:30"))

    def test_fifteen_minutes_is_the_threshold(self) -> None:
        self.m.pointer_down(D, 128, self.c)
        self.m.pointer_move(D, 130, self.c)
        self.assertIsNone(self.m.pointer_up())

        self.m.pointer_down(D, 128, self.c)
        self.m.pointer_move(D, 136, self.c)
        intent = self.m.pointer_up()
        assert intent is not None
        self.assertEqual((intent.start_time, intent.end_time), ("09:00", "09:15"))

    def test_custom_minimum_duration(self) -> None:
        m = TimeDragMachine(DAY_VP, clock=fixed_clock(TODAY), min_duration_min=30)
        m.pointer_down(D, 128, self.c)
        m.pointer_move(D, 136, self.c)
        self.assertIsNone(m.pointer_up())

    def test_past_date_and_event_hits_are_rejected(self) -> None:
        self.assertFalse(self.m.pointer_down(dt.date(2024, 5, 31), 128, self.c))
        self.assertFalse(self.m.pointer_down(D, 128, self.c, on_event=True))
        self.assertIs(self.m.phase, Phase.IDLE)

    def test_elapsed_time_today_is_rejected(self) -> None:
        m = TimeDragMachine(DAY_VP, clock=fixed_clock(dt.datetime(2024, 6, 1, 10, 0)))
        today = dt.date(2024, 6, 1)
        self.assertFalse(m.pointer_down(today, 128, self.c))  # 09:00
        self.assertTrue(m.pointer_down(today, 256, self.c))   # 11:00
        self.assertFalse(m.pointer_move(today, 128, self.c))
        self.assertEqual(m.state.cursor.time.hour, 11)

    def test_second_pointer_down_is_ignored(self) -> None:
        self.m.pointer_down(D, 128, self.c)
        self.assertFalse(self.m.pointer_down(D, 320, self.c))
        self.assertEqual(self.m.state.anchor.time.hour, 9)

    def test_move_on_other_date_is_ignored(self) -> None:
        self.m.pointer_down(D, 128, self.c)
        self.assertFalse(self.m.pointer_move(dt.date(2024, 6, 11), 192, self.c))
        self.assertEqual(self.m.state.cursor.time.hour, 9)

    def test_in_drag_range(self) -> None:
        self.m.pointer_down(D, 128, self.c)
        self.m.pointer_move(D, 192, self.c)
        self.assertTrue(self.m.in_drag_range(D, 9.5))
        self.assertFalse(self.m.in_drag_range(D, 10.5))
        self.assertFalse(self.m.in_drag_range(dt.date(2024, 6, 11), 9.5))

    def test_cancel_and_global_pointer_up(self) -> None:
        self.m.pointer_down(D, 128, self.c)
        self.m.cancel()
        self.assertIs(self.m.phase, Phase.IDLE)
        self.assertIsNone(self.m.pointer_up())
        self.assertIsNone(self.m.global_pointer_up())

        self.m.pointer_down(D, 128, self.c)
        self.m.pointer_move(D, 192, self.c)
        intent = self.m.global_pointer_up()
        assert intent is not None
        self.assertEqual(intent.end_time, "10:00")

    def test_week_grid_allows_times_past_the_working_window(self) -> None:
        m = TimeDragMachine(WEEK_VP, view="week", clock=fixed_clock(TODAY))
        c = _container()
        self.assertTrue(m.pointer_down(D, 174 + 128, c))
        m.pointer_move(D, 174 + 64 * 17, c)
        intent = m.pointer_up()
        assert intent is not None
        self.assertEqual((intent.start_time, intent.end_time, intent.source_view), ("09:00", "00:00", "week"))


class TestAutoScrollContract(unittest.TestCase):
    def setUp(self) -> None:
        self.sched = ManualScheduler()
        self.scroller = AutoScroller(self.sched)
        self.m = TimeDragMachine(DAY_VP, clock=fixed_clock(TODAY), scroller=self.scroller)

    def test_scrolls_down_near_bottom_edge_and_stops_on_release(self) -> None:
        c = _container(height=400.0, scroll_top=100.0, scroll_height=1000.0)
        self.m.pointer_down(D, 200, c)
        self.assertFalse(self.scroller.running)
        self.m.pointer_move(D, 390, c)
        self.assertTrue(self.scroller.running)
        self.assertEqual(self.scroller.direction, 1)

        self.sched.advance(0.05)
        self.assertEqual(c.scroll_top, 124.0)

        self.m.pointer_up()
        self.assertFalse(self.scroller.running)
        self.assertEqual(self.sched.jobs, {})

    def test_scrolls_up_near_top_edge(self) -> None:
        c = _container(height=400.0, scroll_top=100.0, scroll_height=1000.0)
        self.m.pointer_down(D, 200, c)
        self.m.pointer_move(D, 20, c)
        self.assertEqual(self.scroller.direction, -1)
        self.sched.advance(0.05)
        self.assertEqual(c.scroll_top, 76.0)
        self.m.cancel()
        self.assertFalse(self.scroller.running)

    def test_stops_at_scroll_limit(self) -> None:
        c = _container(height=400.0, scroll_top=590.0, scroll_height=1000.0)
        self.m.pointer_down(D, 100, c)
        self.m.pointer_move(D, 390, c)
        self.sched.advance(0.05)
        self.assertEqual(c.scroll_top, 600.0)
        self.assertFalse(self.scroller.running)
        self.assertIs(self.m.phase, Phase.DRAGGING)

    def test_pointer_leave_and_close_release_the_timer(self) -> None:
        c = _container(height=400.0, scroll_top=100.0, scroll_height=1000.0)
        self.m.pointer_down(D, 200, c)
        self.m.pointer_move(D, 390, c)
        self.m.pointer_leave()
        self.assertFalse(self.scroller.running)
        self.assertIs(self.m.phase, Phase.DRAGGING)

        self.m.pointer_move(D, 390, c)
        self.m.close()
        self.assertFalse(self.scroller.running)
        self.assertIs(self.m.phase, Phase.IDLE)

    def test_start_is_idempotent_and_context_manager_releases(self) -> None:
        c = _container(height=400.0, scroll_top=100.0, scroll_height=1000.0)
        with AutoScroller(self.sched) as s:
            s.start(1, c)
            s.start(1, c)
            self.assertEqual(len(self.sched.jobs), 1)
        self.assertFalse(s.running)
        self.assertEqual(self.sched.jobs, {})

    def test_week_pointer_over_other_column_still_scrolls(self) -> None:
        m = TimeDragMachine(WEEK_VP, view="week", clock=fixed_clock(TODAY), scroller=self.scroller)
        c = _container()
        self.assertTrue(m.pointer_down(D, 300, c))
        self.assertFalse(m.pointer_move(dt.date(2024, 6, 11), 590, c))
        self.assertTrue(self.scroller.running)
        self.assertEqual(self.scroller.direction, 1)
        self.assertEqual(m.state.cursor.date, D)
        self.assertEqual(m.state.cursor.time.hour, 9)
        m.pointer_up()
        self.assertFalse(self.scroller.running)

    def test_tick_from_a_cancelled_run_is_ignored(self) -> None:
        first = _container(height=400.0, scroll_top=100.0, scroll_height=1000.0)
        second = _container(height=400.0, scroll_top=100.0, scroll_height=1000.0)
        s = AutoScroller(self.sched)
        s.start(1, first)
        (old_tick,) = [job[2] for job in self.sched.jobs.values()]
        s.stop()
        s.start(-1, second)

        old_tick()
        self.assertTrue(s.running)
        self.assertEqual(s.direction, -1)
        self.assertEqual((first.scroll_top, second.scroll_top), (100.0, 100.0))
        self.assertEqual(len(self.sched.jobs), 1)

        self.sched.advance(0.02)
        self.assertEqual(second.scroll_top, 92.0)
        s.stop()

    def test_view_change_ends_drag_and_scrolling(self) -> None:
        c = _container(height=400.0, scroll_top=100.0, scroll_height=1000.0)
        self.m.pointer_down(D, 200, c)
        self.m.pointer_move(D, 390, c)
        self.assertTrue(self.scroller.running)

        self.m.set_view(WEEK_VP, "week")
        self.assertIs(self.m.phase, Phase.IDLE)
        self.assertIsNone(self.m.state)
        self.assertFalse(self.scroller.running)
        self.assertEqual(self.sched.jobs, {})
        self.assertEqual((self.m.view, self.m.scroll_header_px), ("week", 174.0))
        self.assertTrue(self.m.has_header)
        self.assertIsNone(self.m.pointer_up())

    def test_header_is_excluded_from_scroll_zone(self) -> None:
        c = _container(height=400.0, scroll_top=100.0, scroll_height=1000.0)
        s = AutoScroller(self.sched)
        self.assertEqual(s.wanted_direction(150, c, header_px=0), 0)
        self.assertEqual(s.wanted_direction(150, c, header_px=100), -1)


class TestMonthDragContract(unittest.TestCase):
    def setUp(self) -> None:
        self.m = MonthDragMachine(clock=fixed_clock(TODAY))

    def test_range_selection_emits_dates_only(self) -> None:
        self.assertTrue(self.m.pointer_down(dt.date(2024, 6, 12)))
        self.m.pointer_move(dt.date(2024, 6, 10))
        self.assertEqual(
            self.m.selection(),
            [dt.date(2024, 6, 10), dt.date(2024, 6, 11), dt.date(2024, 6, 12)],
        )
        self.assertTrue(self.m.is_selected(dt.date(2024, 6, 11)))
        self.assertEqual(self.m.pointer_up(), CreateIntent(date="2024-06-10", end_date="2024-06-12", source_view="month"))
        self.assertIs(self.m.phase, Phase.IDLE)

    def test_past_and_other_month_cells_are_rejected(self) -> None:
        self.assertFalse(self.m.pointer_down(dt.date(2024, 5, 30)))
        self.assertFalse(self.m.pointer_down(dt.date(2024, 7, 1), in_current_month=False))
        self.assertIsNone(self.m.pointer_up())

    def test_month_drag_scrolls_near_edge(self) -> None:
        sched = ManualScheduler()
        scroller = AutoScroller(sched)
        m = MonthDragMachine(clock=fixed_clock(TODAY), scroller=scroller)
        c = _container(height=400.0, scroll_top=100.0, scroll_height=1000.0)
        m.pointer_down(dt.date(2024, 6, 10))
        self.assertTrue(m.pointer_move(dt.date(2024, 6, 17), 390, c))
        self.assertEqual(scroller.direction, 1)
        sched.advance(0.05)
        self.assertEqual(c.scroll_top, 124.0)

        intent = m.pointer_up()
        assert intent is not None
        self.assertEqual((intent.date, intent.end_date), ("2024-06-10", "2024-06-17"))
        self.assertFalse(scroller.running)
        self.assertEqual(sched.jobs, {})

    def test_moves_into_the_past_are_ignored(self) -> None:
        self.m.pointer_down(dt.date(2024, 6, 3))
        self.assertFalse(self.m.pointer_move(dt.date(2024, 5, 30)))
        intent = self.m.pointer_up()
        assert intent is not None
        self.assertEqual((intent.date, intent.end_date), ("2024-06-03", "2024-06-03"))


class TestClickIntentContract(unittest.TestCase):
    def test_slot_click(self) -> None:
        clock = fixed_clock(dt.datetime(2024, 6, 1, 10, 30))
        today = dt.date(2024, 6, 1)
        self.assertIsNone(slot_click_intent(today, 9, "day", clock=clock))
        self.assertIsNone(slot_click_intent(today, 10, "day", clock=clock))
        self.assertEqual(
            slot_click_intent(today, 11, "week", clock=clock),
            CreateIntent(date="2024-06-01", end_date="2024-06-01", source_view="week"),
        )
        self.assertIsNone(slot_click_intent(dt.date(2024, 5, 31), 11, "day", clock=clock))
        self.assertIsNone(slot_click_intent(D, 11, "day", clock=clock, dragging=True))

    def test_day_click(self) -> None:
        clock = fixed_clock(TODAY)
        self.assertIsNone(day_click_intent(dt.date(2024, 5, 31), clock=clock))
        self.assertIsNone(day_click_intent(D, clock=clock, in_current_month=False))
        intent = day_click_intent(dt.date(2024, 6, 1), clock=clock)
        assert intent is not None
        self.assertEqual((intent.date, intent.source_view), ("2024-06-01", "month"))


class TestWeekColumnHitContract(unittest.TestCase):
    def test_day_index_from_x(self) -> None:
        self.assertIsNone(day_index_from_x(40, 0, 1000))
        self.assertEqual(day_index_from_x(60, 0, 1000), 0)
        self.assertEqual(day_index_from_x(999, 0, 1000), 6)
        self.assertIsNone(day_index_from_x(1001, 0, 1000))


if __name__ == "__main__":
    unittest.main(verbosity=2)
