from __future__ import annotations

from datetime import timedelta

import pytest

from backend.app.services.slots.calculator import (
    check_availability,
    generate_slot_grid,
    next_available_time,
    summarize_day,
    week_overview,
)
from backend.app.services.slots.config import time_str_to_minutes
from backend.app.services.slots.models import CustomSchedule, PostModel, TimeWindow, WeeklySchedule

from conftest import SATURDAY, SUNDAY, WEDNESDAY, WEEKDAYS_9_TO_18

EVERY_DAY = {day: True for day in ("mon", "tue", "wed", "thu", "fri", "sat", "sun")}


def _post(post_id: int, *, category_id: int = 1, active: bool = True, custom: CustomSchedule | None = None) -> PostModel:
    return PostModel(
        id=post_id,
        name=f"Post {post_id}",
        is_active=active,
        category_id=category_id,
        custom_schedule=custom,
    )


def test_single_post_wednesday_gives_36_slots(weekly_schedule, post_a) -> None:
    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a], tick_minutes=15)

    assert len(grid) == 36
    assert grid[0].time == "09:00"
    assert grid[-1].time == "17:45"
    for slot in grid:
        assert slot.available_posts == 1
        assert slot.total_posts == 1
        assert slot.is_available
        assert [p.post_id for p in slot.covering_posts] == [1]


def test_single_post_saturday_is_empty(weekly_schedule, post_a) -> None:
    assert generate_slot_grid(SATURDAY, weekly_schedule, [post_a]) == []


def test_default_tick_is_15_minutes(weekly_schedule, post_a) -> None:
    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a])
    assert [s.time for s in grid[:3]] == ["09:00", "09:15", "09:30"]


def test_ticks_are_contiguous_and_inside_bounds(weekly_schedule, post_a) -> None:
    evening = _post(2, custom=CustomSchedule(EVERY_DAY, TimeWindow("16:30", "20:00")))
    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a, evening], tick_minutes=15)

    minutes = [time_str_to_minutes(s.time) for s in grid]
    assert minutes[0] == 9 * 60
    assert all(b - a == 15 for a, b in zip(minutes, minutes[1:]))
    assert all(9 * 60 <= m < 20 * 60 for m in minutes)
    assert grid[-1].time == "19:45"


def test_custom_window_overlap_counts_two_posts(weekly_schedule, post_a) -> None:
    post_b = _post(2, custom=CustomSchedule(EVERY_DAY, TimeWindow("14:00", "16:00")))

    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a, post_b])

    assert len(grid) == 36
    for slot in grid:
        assert slot.total_posts == 2
        if "14:00" <= slot.time < "16:00":
            assert slot.available_posts == 2
            assert {p.post_id for p in slot.covering_posts} == {1, 2}
        else:
            assert slot.available_posts == 1
            assert [p.post_id for p in slot.covering_posts] == [1]


def test_custom_schedule_opens_post_on_closed_day(weekly_schedule) -> None:
    sunday_only = CustomSchedule({"sun": True}, TimeWindow("09:00", "12:00"))
    post = _post(7, custom=sunday_only)

    grid = generate_slot_grid(SUNDAY, weekly_schedule, [post])

    assert len(grid) == 12
    assert grid[0].time == "09:00"
    assert grid[-1].time == "11:45"
    assert all(s.available_posts == 1 and s.total_posts == 1 for s in grid)
    assert all(s.covering_posts[0].has_custom_schedule for s in grid)


def test_post_closed_by_custom_schedule_is_not_counted(weekly_schedule, post_a) -> None:
    weekend_only = _post(2, custom=CustomSchedule({"sat": True, "sun": True}, TimeWindow("10:00", "14:00")))

    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a, weekend_only])

    assert {s.total_posts for s in grid} == {1}


def test_inactive_posts_are_ignored(weekly_schedule, post_a) -> None:
    inactive = _post(2, active=False)

    assert generate_slot_grid(WEDNESDAY, weekly_schedule, [inactive]) == []
    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a, inactive])
    assert {s.total_posts for s in grid} == {1}


def test_category_filter_excludes_other_categories(weekly_schedule) -> None:
    posts = [
        _post(1, category_id=1),
        _post(2, category_id=2, custom=CustomSchedule(EVERY_DAY, TimeWindow("07:00", "21:00"))),
        _post(3, category_id=1, custom=CustomSchedule(EVERY_DAY, TimeWindow("12:00", "13:00"))),
    ]

    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, posts, category_id=1)

    assert grid[0].time == "09:00"
    assert grid[-1].time == "17:45"
    for slot in grid:
        assert slot.total_posts == 2
        assert all(p.post_id != 2 for p in slot.covering_posts)


def test_category_without_posts_is_empty(weekly_schedule, post_a) -> None:
    assert generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a], category_id=99) == []


def test_zero_availability_ticks_are_kept(weekly_schedule) -> None:
    posts = [
        _post(1, custom=CustomSchedule(EVERY_DAY, TimeWindow("09:00", "10:00"))),
        _post(2, custom=CustomSchedule(EVERY_DAY, TimeWindow("11:00", "12:00"))),
    ]

    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, posts)

    assert len(grid) == 12
    gap = [s for s in grid if "10:00" <= s.time < "11:00"]
    assert len(gap) == 4
    assert all(s.available_posts == 0 and not s.is_available for s in gap)
    assert all(s.total_posts == 2 for s in gap)


def test_total_posts_is_constant_across_grid(weekly_schedule, post_a) -> None:
    posts = [
        post_a,
        _post(2, custom=CustomSchedule(EVERY_DAY, TimeWindow("07:00", "08:00"))),
        _post(3, custom=CustomSchedule(EVERY_DAY, TimeWindow("19:00", "22:00"))),
    ]
    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, posts)

    assert len({s.total_posts for s in grid}) == 1


def test_identical_inputs_give_identical_output(weekly_schedule, post_a) -> None:
    post_b = _post(2, custom=CustomSchedule(EVERY_DAY, TimeWindow("14:00", "16:00")))

    first = generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a, post_b])
    second = generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a, post_b])

    assert first == second
    assert [s.to_dict() for s in first] == [s.to_dict() for s in second]


def test_malformed_window_degrades_to_empty_grid(weekly_schedule) -> None:
    backwards = _post(1, custom=CustomSchedule(EVERY_DAY, TimeWindow("12:00", "10:00")))

    assert generate_slot_grid(WEDNESDAY, weekly_schedule, [backwards]) == []


def test_slot_duration_does_not_change_grid_step(weekly_schedule) -> None:
    long_post = PostModel(id=1, name="Long", is_active=True, category_id=1, slot_duration_minutes=90)

    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, [long_post])

    assert len(grid) == 36


def test_summarize_day_closed() -> None:
    schedule = WeeklySchedule.from_dict(WEEKDAYS_9_TO_18)

    details = summarize_day(SATURDAY, schedule, [_post(1)])

    assert details.is_working is False
    assert details.total_posts == 0
    assert details.summary is None
    assert details.hourly_breakdown == []


def test_summarize_day_with_partial_coverage(weekly_schedule, post_a) -> None:
    post_b = _post(2, custom=CustomSchedule(EVERY_DAY, TimeWindow("14:00", "16:00")))

    details = summarize_day(WEDNESDAY, weekly_schedule, [post_a, post_b])

    assert details.is_working
    assert details.total_posts == 2
    assert details.working_hours == TimeWindow("09:00", "18:00")
    assert details.summary.total_slots == 36
    assert details.summary.available_slots == 36
    assert details.summary.occupied_slots == 0
    # 72 post-ticks, post B covers 8 of them
    assert details.summary.occupancy_percentage == round((72 - 44) * 100 / 72, 2)

    hours = {h.hour: h for h in details.hourly_breakdown}
    assert sorted(hours) == list(range(9, 18))
    assert hours[9].available_posts == 1
    assert hours[9].occupancy_percentage == 50.0
    assert hours[14].available_posts == 2
    assert hours[14].occupancy_percentage == 0.0


def test_week_overview_covers_seven_days(weekly_schedule, post_a) -> None:
    monday = WEDNESDAY - timedelta(days=2)

    days = week_overview(monday, weekly_schedule, [post_a])

    assert [d.date for d in days] == [monday + timedelta(days=i) for i in range(7)]
    assert [d.is_working for d in days] == [True] * 5 + [False] * 2


def test_next_available_time(weekly_schedule) -> None:
    posts = [
        _post(1, custom=CustomSchedule(EVERY_DAY, TimeWindow("09:00", "10:00"))),
        _post(2, custom=CustomSchedule(EVERY_DAY, TimeWindow("11:00", "12:00"))),
    ]
    grid = generate_slot_grid(WEDNESDAY, weekly_schedule, posts)

    assert next_available_time(grid) == "09:00"
    assert next_available_time(grid, "10:05") == "11:00"
    assert next_available_time(grid, "12:00") is None
    assert next_available_time([], "09:00") is None


def test_summarize_day_reports_off_tick_closing_time(weekly_schedule) -> None:
    post = _post(1, custom=CustomSchedule(EVERY_DAY, TimeWindow("09:00", "17:50")))

    details = summarize_day(WEDNESDAY, weekly_schedule, [post])

    assert details.working_hours == TimeWindow("09:00", "17:50")
    assert details.summary.total_slots == 36


@pytest.mark.parametrize("tick", [0, -15])
def test_non_positive_tick_is_rejected(weekly_schedule, post_a, tick: int) -> None:
    with pytest.raises(ValueError):
        generate_slot_grid(WEDNESDAY, weekly_schedule, [post_a], tick_minutes=tick)


def test_check_availability_counts_posts_covering_whole_interval(weekly_schedule, post_a) -> None:
    post_b = _post(2, custom=CustomSchedule(EVERY_DAY, TimeWindow("14:00", "16:00")))
    posts = [post_a, post_b]

    both = check_availability(WEDNESDAY, weekly_schedule, posts, "14:00", 60)
    assert both.available
    assert both.available_posts_count == 2
    assert both.total_posts_count == 2
    assert both.available_post_ids == (1, 2)

    # Runs past post B's closing time
    one = check_availability(WEDNESDAY, weekly_schedule, posts, "15:30", 60)
    assert one.available_posts_count == 1
    assert one.available_post_ids == (1,)


def test_check_availability_rejects_interval_past_closing(weekly_schedule, post_a) -> None:
    result = check_availability(WEDNESDAY, weekly_schedule, [post_a], "17:30", 60)

    assert result.available is False
    assert result.available_posts_count == 0
    assert result.total_posts_count == 1
    assert "17:30" in result.reason


def test_check_availability_respects_off_tick_window_end(weekly_schedule) -> None:
    post = _post(1, custom=CustomSchedule(EVERY_DAY, TimeWindow("09:00", "17:50")))

    assert check_availability(WEDNESDAY, weekly_schedule, [post], "17:30", 20).available
    assert not check_availability(WEDNESDAY, weekly_schedule, [post], "17:45", 15).available


def test_check_availability_closed_day_and_category(weekly_schedule, post_a) -> None:
    closed = check_availability(SATURDAY, weekly_schedule, [post_a], "10:00", 30)
    assert closed.available is False
    assert closed.total_posts_count == 0

    other_category = check_availability(WEDNESDAY, weekly_schedule, [post_a], "10:00", 30, category_id=2)
    assert other_category.available is False


def test_check_availability_rejects_non_positive_duration(weekly_schedule, post_a) -> None:
    with pytest.raises(ValueError):
        check_availability(WEDNESDAY, weekly_schedule, [post_a], "10:00", 0)
