from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timekeeping.errors import InvalidInputError
from timekeeping.models import DailyAggregate, EntryType, RawEvent, ReconcileFlag

logger = logging.getLogger("timekeeping.reconciler")

MS_PER_MINUTE = 60_000

DayKey = tuple[str, str, date]


def resolve_timezone(tz: ZoneInfo | str | None) -> ZoneInfo:
    if isinstance(tz, ZoneInfo):
        return tz
    name = (tz or "").strip() or "UTC"
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidInputError("INVALID_TIMEZONE", f"Unknown timezone: {name}") from exc


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _elapsed_ms(start: datetime, end: datetime) -> int:
    return (end - start) // timedelta(milliseconds=1)


def local_work_date(ts: datetime, tz: ZoneInfo | str | None = None) -> date:
    return _to_utc(ts).astimezone(resolve_timezone(tz)).date()


# At the same instant closing events sort before opening ones.
_SAME_INSTANT_RANK = {
    EntryType.CLOCK_OUT: 0,
    EntryType.BREAK_END: 0,
    EntryType.CLOCK_IN: 1,
    EntryType.BREAK_START: 1,
}


def sort_events(events: Iterable[RawEvent]) -> list[RawEvent]:
    return sorted(
        events,
        key=lambda event: (_to_utc(event.timestamp), _SAME_INSTANT_RANK[EntryType(event.type)], event.id),
    )


def group_events_by_day(
    events: Iterable[RawEvent],
    tz: ZoneInfo | str | None = None,
) -> dict[DayKey, list[RawEvent]]:
    zone = resolve_timezone(tz)
    buckets: dict[DayKey, list[RawEvent]] = defaultdict(list)
    for event in events:
        key = (event.user_id, event.location_id, local_work_date(event.timestamp, zone))
        buckets[key].append(event)
    return {key: sort_events(bucket) for key, bucket in sorted(buckets.items())}


def _validate_single_key(events: Sequence[RawEvent], zone: ZoneInfo, work_date: date | None) -> date:
    first = events[0]
    expected_date = work_date or local_work_date(first.timestamp, zone)
    for event in events:
        if event.user_id != first.user_id:
            raise InvalidInputError(
                "MIXED_USERS",
                f"Events for users {first.user_id!r} and {event.user_id!r} cannot be reconciled together",
            )
        if event.location_id != first.location_id:
            raise InvalidInputError(
                "MIXED_LOCATIONS",
                f"Events for locations {first.location_id!r} and {event.location_id!r} cannot be reconciled together",
            )
        event_date = local_work_date(event.timestamp, zone)
        if event_date != expected_date:
            raise InvalidInputError(
                "MIXED_DAYS",
                f"Event {event.id!r} falls on {event_date.isoformat()}, expected {expected_date.isoformat()}",
            )
    return expected_date


def meets_daily_policy(total_minutes: int, minimum_minutes_per_day: int) -> bool:
    return total_minutes > 0 and total_minutes >= max(0, minimum_minutes_per_day)


def reconcile_day(
    events: Iterable[RawEvent],
    *,
    tz: ZoneInfo | str | None = None,
    work_date: date | None = None,
    minimum_minutes_per_day: int = 0,
) -> DailyAggregate | None:
    """Derive the work day aggregate for one (user, location, local date).

    Returns ``None`` when no events remain, meaning the stored aggregate
    must be removed. Events are sorted here; caller order is not trusted.
    Only closed intervals count: a trailing clock-in or break start adds
    nothing until its closing event arrives.
    """
    ordered = sort_events(events)
    if not ordered:
        return None

    zone = resolve_timezone(tz)
    day = _validate_single_key(ordered, zone, work_date)

    work_ms = 0
    break_ms = 0
    open_clock_in: datetime | None = None
    open_break_start: datetime | None = None
    first_clock_in: datetime | None = None
    last_clock_out: datetime | None = None
    flags: set[str] = set()

    for event in ordered:
        ts = _to_utc(event.timestamp)
        if event.type == EntryType.CLOCK_IN:
            if open_clock_in is not None:
                flags.add(ReconcileFlag.DUPLICATE_CLOCK_IN.value)
            open_clock_in = ts
            if first_clock_in is None or ts < first_clock_in:
                first_clock_in = ts
        elif event.type == EntryType.CLOCK_OUT:
            if open_clock_in is not None:
                work_ms += _elapsed_ms(open_clock_in, ts)
                open_clock_in = None
            else:
                flags.add(ReconcileFlag.UNMATCHED_CLOCK_OUT.value)
            if last_clock_out is None or ts > last_clock_out:
                last_clock_out = ts
        elif event.type == EntryType.BREAK_START:
            if open_break_start is not None:
                flags.add(ReconcileFlag.DUPLICATE_BREAK_START.value)
            open_break_start = ts
        elif event.type == EntryType.BREAK_END:
            if open_break_start is not None:
                break_ms += _elapsed_ms(open_break_start, ts)
                open_break_start = None
            else:
                flags.add(ReconcileFlag.UNMATCHED_BREAK_END.value)

    if open_clock_in is not None:
        flags.add(ReconcileFlag.OPEN_CLOCK_IN.value)
    if open_break_start is not None:
        flags.add(ReconcileFlag.OPEN_BREAK_START.value)

    total_minutes = max(0, (work_ms - break_ms) // MS_PER_MINUTE)
    break_minutes = max(0, break_ms // MS_PER_MINUTE)
    first = ordered[0]

    aggregate = DailyAggregate(
        user_id=first.user_id,
        location_id=first.location_id,
        date=day,
        total_minutes=total_minutes,
        break_minutes=break_minutes,
        meets_policy=meets_daily_policy(total_minutes, minimum_minutes_per_day),
        first_clock_in=first_clock_in,
        last_clock_out=last_clock_out,
        flags=tuple(sorted(flags)),
    )

    if flags:
        logger.warning(
            "reconcile_anomaly",
            extra={
                "user_id": aggregate.user_id,
                "location_id": aggregate.location_id,
                "work_date": day.isoformat(),
                "flags": list(aggregate.flags),
            },
        )
    logger.debug(
        "workday_reconciled",
        extra={
            "user_id": aggregate.user_id,
            "location_id": aggregate.location_id,
            "work_date": day.isoformat(),
            "event_count": len(ordered),
            "total_minutes": total_minutes,
            "break_minutes": break_minutes,
        },
    )
    return aggregate


def reconcile_events(
    events: Iterable[RawEvent],
    *,
    tz: ZoneInfo | str | None = None,
    minimum_minutes_per_day: int = 0,
) -> list[DailyAggregate]:
    zone = resolve_timezone(tz)
    aggregates: list[DailyAggregate] = []
    for (_user_id, _location_id, day), bucket in group_events_by_day(events, zone).items():
        aggregate = reconcile_day(
            bucket,
            tz=zone,
            work_date=day,
            minimum_minutes_per_day=minimum_minutes_per_day,
        )
        if aggregate is not None:
            aggregates.append(aggregate)
    return aggregates
