from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from timekeeping.models import (
    CompliancePolicy,
    DailyAggregate,
    DailyTotal,
    EntryType,
    LocationCategory,
    OvertimePolicyPatch,
    RawEvent,
)


class RawEventIn(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    user_id: str = Field(min_length=1, max_length=64)
    location_id: str = Field(min_length=1, max_length=64)
    type: EntryType
    timestamp: datetime

    def to_domain(self) -> RawEvent:
        return RawEvent(
            id=self.id,
            user_id=self.user_id,
            location_id=self.location_id,
            type=self.type,
            timestamp=self.timestamp,
        )


class OvertimePolicyPatchIn(BaseModel):
    weekly_threshold_minutes: int | None = Field(default=None, ge=0)
    daily_threshold_minutes: int | None = Field(default=None, ge=0, le=1440)
    daily_double_time_minutes: int | None = Field(default=None, ge=0, le=1440)
    seventh_day_rule: bool | None = None

    def to_domain(self) -> OvertimePolicyPatch:
        return OvertimePolicyPatch(
            weekly_threshold_minutes=self.weekly_threshold_minutes,
            daily_threshold_minutes=self.daily_threshold_minutes,
            daily_double_time_minutes=self.daily_double_time_minutes,
            seventh_day_rule=self.seventh_day_rule,
        )


class OvertimePolicyRead(BaseModel):
    weekly_threshold_minutes: int
    daily_threshold_minutes: int
    daily_double_time_minutes: int
    seventh_day_rule: bool

    model_config = ConfigDict(from_attributes=True)


class CompliancePolicyIn(BaseModel):
    required_days_per_week: int = Field(ge=0, le=7)
    minimum_minutes_per_day: int = Field(default=0, ge=0, le=1440)
    weekdays_only: bool = False

    def to_domain(self) -> CompliancePolicy:
        return CompliancePolicy(
            required_days_per_week=self.required_days_per_week,
            minimum_minutes_per_day=self.minimum_minutes_per_day,
            weekdays_only=self.weekdays_only,
        )


class ResolvePolicyRequest(BaseModel):
    jurisdiction: str | None = Field(default=None, max_length=50)
    override: OvertimePolicyPatchIn | None = None


class ResolvePolicyResponse(BaseModel):
    jurisdiction: str | None
    known_jurisdiction: bool
    policy: OvertimePolicyRead


class JurisdictionRead(BaseModel):
    code: str
    name: str
    features: dict[str, Any] = Field(default_factory=dict)
    overtime_policy: OvertimePolicyRead | None = None


class JurisdictionListResponse(BaseModel):
    default_policy: OvertimePolicyRead
    jurisdictions: list[JurisdictionRead]


class ReconcileDayRequest(BaseModel):
    events: list[RawEventIn] = Field(default_factory=list)
    timezone: str | None = Field(default=None, max_length=64)
    work_date: date | None = None
    minimum_minutes_per_day: int | None = Field(default=None, ge=0, le=1440)


class DailyAggregateRead(BaseModel):
    user_id: str
    location_id: str
    date: date
    total_minutes: int
    break_minutes: int
    meets_policy: bool
    first_clock_in: datetime | None
    last_clock_out: datetime | None
    flags: list[str]

    model_config = ConfigDict(from_attributes=True)


class ReconcileDayResponse(BaseModel):
    workday: DailyAggregateRead | None


class DailyTotalIn(BaseModel):
    date: date
    total_minutes: int = Field(ge=0)

    def to_domain(self) -> DailyTotal:
        return DailyTotal(date=self.date, total_minutes=self.total_minutes)


class WeeklyOvertimeRequest(BaseModel):
    days: list[DailyTotalIn] = Field(default_factory=list)
    jurisdiction: str | None = Field(default=None, max_length=50)
    override: OvertimePolicyPatchIn | None = None


class DayBreakdownRead(BaseModel):
    date: date
    regular_minutes: int
    overtime_minutes: int
    double_time_minutes: int

    model_config = ConfigDict(from_attributes=True)


class WeeklyOvertimeRead(BaseModel):
    regular_minutes: int
    overtime_minutes: int
    double_time_minutes: int
    total_minutes: int
    daily_breakdown: list[DayBreakdownRead]

    model_config = ConfigDict(from_attributes=True)


class WeeklyOvertimeResponse(WeeklyOvertimeRead):
    policy: OvertimePolicyRead


class DailyAggregateIn(BaseModel):
    user_id: str = Field(min_length=1, max_length=64)
    location_id: str = Field(min_length=1, max_length=64)
    date: date
    total_minutes: int = Field(ge=0)
    break_minutes: int = Field(default=0, ge=0)
    meets_policy: bool
    first_clock_in: datetime | None = None
    last_clock_out: datetime | None = None

    def to_domain(self) -> DailyAggregate:
        return DailyAggregate(
            user_id=self.user_id,
            location_id=self.location_id,
            date=self.date,
            total_minutes=self.total_minutes,
            break_minutes=self.break_minutes,
            meets_policy=self.meets_policy,
            first_clock_in=self.first_clock_in,
            last_clock_out=self.last_clock_out,
        )


class WeeklyComplianceRequest(BaseModel):
    aggregates: list[DailyAggregateIn] = Field(default_factory=list)
    policy: CompliancePolicyIn | None = None
    location_categories: dict[str, LocationCategory] = Field(default_factory=dict)


class WeeklyComplianceRead(BaseModel):
    days_worked: int
    required_days: int
    is_compliant: bool

    model_config = ConfigDict(from_attributes=True)


class WeekSummaryRequest(BaseModel):
    date: date
    events: list[RawEventIn] = Field(default_factory=list)
    timezone: str | None = Field(default=None, max_length=64)
    week_starts_on: int | None = Field(default=None, ge=0, le=6)
    jurisdiction: str | None = Field(default=None, max_length=50)
    override: OvertimePolicyPatchIn | None = None
    policy: CompliancePolicyIn | None = None
    location_categories: dict[str, LocationCategory] = Field(default_factory=dict)


class WeekDayStatusRead(BaseModel):
    date: date
    weekday: str
    worked: bool
    total_minutes: int

    model_config = ConfigDict(from_attributes=True)


class WeekSummaryResponse(BaseModel):
    week_start: date
    week_end: date
    total_minutes: int
    overtime: WeeklyOvertimeRead
    compliance: WeeklyComplianceRead
    days: list[WeekDayStatusRead]
    workdays: list[DailyAggregateRead]

    model_config = ConfigDict(from_attributes=True)
