from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date, timedelta

from timekeeping.errors import InvalidInputError
from timekeeping.models import (
    CompliancePolicy,
    DailyAggregate,
    DailyTotal,
    LocationCategory,
    OvertimePolicy,
    WeekDayStatus,
    WeekSummary,
)
from timekeeping.services.compliance import (
    SYSTEM_DEFAULT_COMPLIANCE_POLICY,
    counted_dates,
    ensure_single_user,
    evaluate_weekly_compliance,
)
from timekeeping.services.overtime import calculate_weekly_overtime
from timekeeping.services.policy_registry import DEFAULT_OVERTIME_POLICY

DAYS_PER_WEEK = 7
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def week_bounds(day: date, week_starts_on: int = 0) -> tuple[date, date]:
    if not 0 <= week_starts_on <= 6:
        raise InvalidInputError("INVALID_WEEK", f"week_starts_on must be 0-6, got {week_starts_on}")
    offset = (day.weekday() - week_starts_on) % DAYS_PER_WEEK
    start = day - timedelta(days=offset)
    return start, start + timedelta(days=DAYS_PER_WEEK - 1)


def week_dates(week_start: date) -> list[date]:
    return [week_start + timedelta(days=index) for index in range(DAYS_PER_WEEK)]


def build_week_totals(aggregates: Iterable[DailyAggregate], week_start: date) -> list[DailyTotal]:
    dates = week_dates(week_start)
    minutes_by_date: dict[date, int] = defaultdict(int)
    for aggregate in aggregates:
        if dates[0] <= aggregate.date <= dates[-1]:
            minutes_by_date[aggregate.date] += max(0, aggregate.total_minutes)
    return [DailyTotal(date=item, total_minutes=minutes_by_date[item]) for item in dates]


def summarize_week(
    aggregates: Iterable[DailyAggregate],
    *,
    week_start: date,
    overtime_policy: OvertimePolicy = DEFAULT_OVERTIME_POLICY,
    compliance_policy: CompliancePolicy = SYSTEM_DEFAULT_COMPLIANCE_POLICY,
    location_categories: Mapping[str, LocationCategory] | None = None,
) -> WeekSummary:
    dates = week_dates(week_start)
    in_week = [item for item in ensure_single_user(aggregates) if dates[0] <= item.date <= dates[-1]]

    totals = build_week_totals(in_week, week_start)
    overtime = calculate_weekly_overtime(totals, overtime_policy)
    compliance = evaluate_weekly_compliance(
        in_week,
        compliance_policy,
        location_categories=location_categories,
    )
    worked_dates = counted_dates(in_week, compliance_policy, location_categories)

    days = [
        WeekDayStatus(
            date=total.date,
            weekday=WEEKDAY_LABELS[total.date.weekday()],
            worked=total.date in worked_dates,
            total_minutes=total.total_minutes,
        )
        for total in totals
    ]
    return WeekSummary(
        week_start=dates[0],
        week_end=dates[-1],
        total_minutes=sum(total.total_minutes for total in totals),
        overtime=overtime,
        compliance=compliance,
        days=days,
    )
