# backend/app/services/slots/calculator.py
"""
Slot grid generation for a service point on a specific date.

Produces one TimeSlot per tick between the earliest post opening and
the latest post closing:
  (time "HH:MM", available_posts, total_posts, covering_posts)

Contains:
✓ work schedule of the service point
✓ per-post custom schedules
✓ post activity flag and category filter

Does NOT contain:
✗ Existing bookings (the grid is a theoretical preview)
✗ Post slot_duration (grid step is the fixed tick)
"""

from dataclasses import dataclass, field
from datetime import date, timedelta

from .config import BookingConfig, get_booking_config, minutes_to_time_str, time_str_to_minutes
from .models import CoveringPost, PostModel, TimeSlot, TimeWindow, WeeklySchedule, weekday_key
from .resolver import resolve_window
from .seasonal import SeasonalSchedule, schedule_for_date


def operating_posts(
    target_date: date,
    default_schedule: WeeklySchedule,
    posts: list[PostModel],
    category_id: int | None = None,
) -> list[tuple[PostModel, TimeWindow]]:
    """Active posts passing the category filter, with their window that day."""
    weekday = weekday_key(target_date)

    operating: list[tuple[PostModel, TimeWindow]] = []
    for post in posts:
        if not post.is_active:
            continue
        if category_id is not None and post.category_id != category_id:
            continue
        window = resolve_window(post, weekday, default_schedule)
        if window is None:
            continue
        operating.append((post, window))
    return operating


def _tick_step(tick_minutes: int | None) -> int:
    step = get_booking_config().tick_minutes if tick_minutes is None else tick_minutes
    if step <= 0:
        raise ValueError(f"tick_minutes must be positive, got {step}")
    return step


def generate_slot_grid(
    target_date: date,
    default_schedule: WeeklySchedule,
    posts: list[PostModel],
    category_id: int | None = None,
    tick_minutes: int | None = None,
) -> list[TimeSlot]:
    """
    Generate the slot grid of a day.

    Returns:
        Chronological list of TimeSlot. Empty list = no post operates
        that day (under the category filter), not an error.

    Raises:
        ValueError: `tick_minutes` is not positive.
    """
    step = _tick_step(tick_minutes)

    # Step 1: Active posts passing the category filter that operate today
    candidates = operating_posts(target_date, default_schedule, posts, category_id)
    if not candidates:
        return []

    # Step 2: Grid bounds
    bounds = [(w.start_minutes, w.end_minutes) for _, w in candidates]
    grid_start = min(start for start, _ in bounds)
    grid_end = max(end for _, end in bounds)
    total = len(candidates)

    # Step 3: Walk ticks, zero-availability ticks included
    slots: list[TimeSlot] = []
    t = grid_start
    while t < grid_end:
        covering = tuple(
            CoveringPost(
                post_id=post.id,
                name=post.name,
                has_custom_schedule=post.has_custom_schedule,
            )
            for (post, _), (start, end) in zip(candidates, bounds)
            if start <= t < end
        )
        slots.append(TimeSlot(
            time=minutes_to_time_str(t),
            available_posts=len(covering),
            total_posts=total,
            covering_posts=covering,
        ))
        t += step

    return slots


# ── Day details ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HourBreakdown:
    hour: int
    available_posts: int
    total_posts: int
    occupancy_percentage: float


@dataclass(frozen=True)
class DaySummary:
    total_slots: int
    available_slots: int
    occupied_slots: int
    occupancy_percentage: float


@dataclass(frozen=True)
class DayDetails:
    date: date
    is_working: bool
    total_posts: int
    working_hours: TimeWindow | None = None
    summary: DaySummary | None = None
    hourly_breakdown: list[HourBreakdown] = field(default_factory=list)


def _occupancy(slots: list[TimeSlot]) -> float:
    """Percentage of post-ticks not covered by any post window."""
    capacity = sum(s.total_posts for s in slots)
    if not capacity:
        return 0.0
    free = sum(s.available_posts for s in slots)
    return round((capacity - free) * 100 / capacity, 2)


def summarize_day(
    target_date: date,
    default_schedule: WeeklySchedule,
    posts: list[PostModel],
    category_id: int | None = None,
    config: BookingConfig | None = None,
) -> DayDetails:
    """Day details built from the grid of `target_date`."""
    config = config or get_booking_config()
    grid = generate_slot_grid(
        target_date, default_schedule, posts, category_id, config.tick_minutes
    )
    if not grid:
        return DayDetails(date=target_date, is_working=False, total_posts=0)

    # Real closing time; the last tick may start before an off-tick end
    windows = [w for _, w in operating_posts(target_date, default_schedule, posts, category_id)]
    grid_end = max(w.end_minutes for w in windows)
    available = sum(1 for s in grid if s.is_available)

    by_hour: dict[int, list[TimeSlot]] = {}
    for slot in grid:
        by_hour.setdefault(time_str_to_minutes(slot.time) // 60, []).append(slot)

    return DayDetails(
        date=target_date,
        is_working=True,
        total_posts=grid[0].total_posts,
        working_hours=TimeWindow(grid[0].time, minutes_to_time_str(grid_end)),
        summary=DaySummary(
            total_slots=len(grid),
            available_slots=available,
            occupied_slots=len(grid) - available,
            occupancy_percentage=_occupancy(grid),
        ),
        hourly_breakdown=[
            HourBreakdown(
                hour=hour,
                available_posts=min(s.available_posts for s in hour_slots),
                total_posts=hour_slots[0].total_posts,
                occupancy_percentage=_occupancy(hour_slots),
            )
            for hour, hour_slots in sorted(by_hour.items())
        ],
    )


def week_overview(
    start_date: date,
    default_schedule: WeeklySchedule,
    posts: list[PostModel],
    category_id: int | None = None,
    config: BookingConfig | None = None,
    seasonal_schedules: list[SeasonalSchedule] | None = None,
) -> list[DayDetails]:
    """Day details for `config.week_days` consecutive days."""
    config = config or get_booking_config()
    days = [start_date + timedelta(days=offset) for offset in range(config.week_days)]
    return [
        summarize_day(
            day,
            schedule_for_date(default_schedule, seasonal_schedules, day),
            posts,
            category_id,
            config,
        )
        for day in days
    ]


def next_available_time(
    grid: list[TimeSlot],
    after_time: str | None = None,
) -> str | None:
    """First available slot at or after `after_time` ("HH:MM")."""
    threshold = time_str_to_minutes(after_time) if after_time else 0
    for slot in grid:
        if slot.is_available and time_str_to_minutes(slot.time) >= threshold:
            return slot.time
    return None


# ── Availability check ───────────────────────────────────────────────────


@dataclass(frozen=True)
class AvailabilityCheck:
    available: bool
    available_posts_count: int
    total_posts_count: int
    available_post_ids: tuple[int | None, ...] = ()
    reason: str | None = None


def check_availability(
    target_date: date,
    default_schedule: WeeklySchedule,
    posts: list[PostModel],
    start_time: str,
    duration_minutes: int,
    category_id: int | None = None,
    tick_minutes: int | None = None,
) -> AvailabilityCheck:
    """
    Whether some post operates for the whole of [start_time, start_time + duration).

    `total_posts_count` is the grid's total for the day. A post is counted
    as available when its window contains the entire interval. Bookings
    are not taken into account, same as the grid.

    Raises:
        ValueError: `duration_minutes` is not positive.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

    grid = generate_slot_grid(target_date, default_schedule, posts, category_id, tick_minutes)
    if not grid:
        return AvailabilityCheck(
            available=False,
            available_posts_count=0,
            total_posts_count=0,
            reason="No posts operate on this day",
        )

    start = time_str_to_minutes(start_time)
    end = start + duration_minutes
    covering = tuple(
        post.id
        for post, window in operating_posts(target_date, default_schedule, posts, category_id)
        if window.start_minutes <= start and end <= window.end_minutes
    )

    total = grid[0].total_posts
    if not covering:
        return AvailabilityCheck(
            available=False,
            available_posts_count=0,
            total_posts_count=total,
            reason=f"No post is free from {start_time} for {duration_minutes} minutes",
        )
    return AvailabilityCheck(
        available=True,
        available_posts_count=len(covering),
        total_posts_count=total,
        available_post_ids=covering,
    )
