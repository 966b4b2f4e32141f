from __future__ import annotations

import logging
from collections.abc import Sequence

from timekeeping.models import DailyTotal, DayBreakdown, OvertimePolicy, WeeklyOvertimeResult
from timekeeping.services.policy_registry import DEFAULT_OVERTIME_POLICY

logger = logging.getLogger("timekeeping.overtime")

SEVENTH_DAY_OVERTIME_MINUTES = 480
SEVENTH_CONSECUTIVE_DAY = 7


def split_day(total_minutes: int, policy: OvertimePolicy) -> tuple[int, int, int]:
    """Split one day into (regular, overtime, double_time) by daily rules."""
    minutes = max(0, total_minutes)
    threshold = max(0, policy.daily_threshold_minutes)
    double_time = max(0, policy.daily_double_time_minutes)

    if threshold == 0:
        return minutes, 0, 0

    if double_time > 0 and minutes > double_time:
        regular = min(threshold, double_time)
        return regular, max(0, double_time - threshold), minutes - double_time

    regular = min(minutes, threshold)
    return regular, minutes - regular, 0


def split_seventh_day(total_minutes: int) -> tuple[int, int, int]:
    minutes = max(0, total_minutes)
    if minutes > SEVENTH_DAY_OVERTIME_MINUTES:
        return 0, SEVENTH_DAY_OVERTIME_MINUTES, minutes - SEVENTH_DAY_OVERTIME_MINUTES
    return 0, minutes, 0


def calculate_weekly_overtime(
    days: Sequence[DailyTotal],
    policy: OvertimePolicy = DEFAULT_OVERTIME_POLICY,
) -> WeeklyOvertimeResult:
    """Split a run of chronological daily totals into regular, OT and DT.

    Daily rules classify each day first. Weekly overtime then moves the
    regular pool above the weekly threshold into overtime, so minutes
    already counted as daily overtime or double-time are never counted
    twice. ``daily_breakdown`` reflects the daily split only.
    """
    weekly_regular = 0
    weekly_overtime = 0
    weekly_double_time = 0
    consecutive_work_days = 0
    breakdown: list[DayBreakdown] = []

    for day in days:
        minutes = max(0, day.total_minutes)
        if minutes > 0:
            consecutive_work_days += 1
        else:
            consecutive_work_days = 0

        if policy.seventh_day_rule and consecutive_work_days >= SEVENTH_CONSECUTIVE_DAY:
            day_regular, day_overtime, day_double_time = split_seventh_day(minutes)
        else:
            day_regular, day_overtime, day_double_time = split_day(minutes, policy)

        weekly_regular += day_regular
        weekly_overtime += day_overtime
        weekly_double_time += day_double_time
        breakdown.append(
            DayBreakdown(
                date=day.date,
                regular_minutes=day_regular,
                overtime_minutes=day_overtime,
                double_time_minutes=day_double_time,
            )
        )

    weekly_threshold = policy.weekly_threshold_minutes
    if weekly_threshold > 0 and weekly_regular > weekly_threshold:
        weekly_excess = weekly_regular - weekly_threshold
        weekly_overtime += weekly_excess
        weekly_regular = weekly_threshold

    result = WeeklyOvertimeResult(
        regular_minutes=weekly_regular,
        overtime_minutes=weekly_overtime,
        double_time_minutes=weekly_double_time,
        total_minutes=weekly_regular + weekly_overtime + weekly_double_time,
        daily_breakdown=breakdown,
    )
    logger.debug(
        "weekly_overtime_calculated",
        extra={
            "day_count": len(breakdown),
            "regular_minutes": result.regular_minutes,
            "overtime_minutes": result.overtime_minutes,
            "double_time_minutes": result.double_time_minutes,
        },
    )
    return result
