from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime


class EntryType(str, enum.Enum):
    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"


class LocationCategory(str, enum.Enum):
    PLANT = "PLANT"
    OFFICE = "OFFICE"
    HOME = "HOME"
    OTHER = "OTHER"


class ReconcileFlag(str, enum.Enum):
    DUPLICATE_CLOCK_IN = "DUPLICATE_CLOCK_IN"
    DUPLICATE_BREAK_START = "DUPLICATE_BREAK_START"
    UNMATCHED_CLOCK_OUT = "UNMATCHED_CLOCK_OUT"
    UNMATCHED_BREAK_END = "UNMATCHED_BREAK_END"
    OPEN_CLOCK_IN = "OPEN_CLOCK_IN"
    OPEN_BREAK_START = "OPEN_BREAK_START"


@dataclass(frozen=True)
class RawEvent:
    id: str
    user_id: str
    location_id: str
    type: EntryType
    timestamp: datetime


@dataclass(frozen=True)
class DailyAggregate:
    """One reconciled work day for a (user, location, local date) key."""

    user_id: str
    location_id: str
    date: date
    total_minutes: int
    break_minutes: int
    meets_policy: bool
    first_clock_in: datetime | None
    last_clock_out: datetime | None
    flags: tuple[str, ...] = ()


@dataclass(frozen=True)
class OvertimePolicy:
    weekly_threshold_minutes: int = 2400
    daily_threshold_minutes: int = 0
    daily_double_time_minutes: int = 0
    seventh_day_rule: bool = False


@dataclass(frozen=True)
class OvertimePolicyPatch:
    # None means "keep the base value".
    weekly_threshold_minutes: int | None = None
    daily_threshold_minutes: int | None = None
    daily_double_time_minutes: int | None = None
    seventh_day_rule: bool | None = None


@dataclass(frozen=True)
class CompliancePolicy:
    required_days_per_week: int = 3
    minimum_minutes_per_day: int = 0
    weekdays_only: bool = False


@dataclass(frozen=True)
class CompliancePolicyDocument:
    policy: CompliancePolicy
    effective_date: date
    jurisdiction: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class DailyTotal:
    date: date
    total_minutes: int


@dataclass(frozen=True)
class DayBreakdown:
    date: date
    regular_minutes: int
    overtime_minutes: int
    double_time_minutes: int


@dataclass(frozen=True)
class WeeklyOvertimeResult:
    regular_minutes: int
    overtime_minutes: int
    double_time_minutes: int
    total_minutes: int
    daily_breakdown: list[DayBreakdown] = field(default_factory=list)


@dataclass(frozen=True)
class WeeklyComplianceResult:
    days_worked: int
    required_days: int
    is_compliant: bool


@dataclass(frozen=True)
class WeekDayStatus:
    date: date
    weekday: str
    worked: bool
    total_minutes: int


@dataclass(frozen=True)
class WeekSummary:
    week_start: date
    week_end: date
    total_minutes: int
    overtime: WeeklyOvertimeResult
    compliance: WeeklyComplianceResult
    days: list[WeekDayStatus] = field(default_factory=list)
