from zoneinfo import ZoneInfo

from fastapi import APIRouter

from timekeeping.errors import ApiError
from timekeeping.models import CompliancePolicy, DailyAggregate, OvertimePolicy
from timekeeping.schemas import (
    CompliancePolicyIn,
    DailyAggregateRead,
    OvertimePolicyPatchIn,
    OvertimePolicyRead,
    ReconcileDayRequest,
    ReconcileDayResponse,
    WeeklyComplianceRead,
    WeeklyComplianceRequest,
    WeeklyOvertimeRead,
    WeeklyOvertimeRequest,
    WeeklyOvertimeResponse,
    WeekDayStatusRead,
    WeekSummaryRequest,
    WeekSummaryResponse,
)
from timekeeping.services.compliance import evaluate_weekly_compliance
from timekeeping.services.overtime import calculate_weekly_overtime
from timekeeping.services.policy_registry import resolve_overtime_policy
from timekeeping.services.reconciler import reconcile_day, reconcile_events
from timekeeping.services.week import summarize_week, week_bounds
from timekeeping.settings import get_default_timezone, get_settings, get_week_starts_on

router = APIRouter(tags=["workdays"])


def _compliance_policy(payload: CompliancePolicyIn | None) -> CompliancePolicy:
    if payload is not None:
        return payload.to_domain()
    settings = get_settings()
    return CompliancePolicy(
        required_days_per_week=settings.default_required_days_per_week,
        minimum_minutes_per_day=settings.default_minimum_minutes_per_day,
    )


def _overtime_policy(jurisdiction: str | None, override: OvertimePolicyPatchIn | None) -> OvertimePolicy:
    code = jurisdiction if jurisdiction is not None else get_settings().default_jurisdiction
    return resolve_overtime_policy(code, override.to_domain() if override else None)


def _timezone(name: str | None) -> ZoneInfo | str:
    return name if name else get_default_timezone()


def _aggregate_read(aggregate: DailyAggregate) -> DailyAggregateRead:
    return DailyAggregateRead.model_validate(aggregate)


@router.post("/api/workdays/reconcile", response_model=ReconcileDayResponse)
def reconcile_workday(payload: ReconcileDayRequest) -> ReconcileDayResponse:
    minimum = payload.minimum_minutes_per_day
    if minimum is None:
        minimum = get_settings().default_minimum_minutes_per_day
    aggregate = reconcile_day(
        [event.to_domain() for event in payload.events],
        tz=_timezone(payload.timezone),
        work_date=payload.work_date,
        minimum_minutes_per_day=minimum,
    )
    return ReconcileDayResponse(workday=_aggregate_read(aggregate) if aggregate else None)


@router.post("/api/overtime/weekly", response_model=WeeklyOvertimeResponse)
def weekly_overtime(payload: WeeklyOvertimeRequest) -> WeeklyOvertimeResponse:
    seen_dates = [day.date for day in payload.days]
    if len(set(seen_dates)) != len(seen_dates):
        raise ApiError(
            status_code=422,
            code="DUPLICATE_DATES",
            message="Each date may appear only once in days.",
        )

    policy = _overtime_policy(payload.jurisdiction, payload.override)
    days = sorted((day.to_domain() for day in payload.days), key=lambda item: item.date)
    result = calculate_weekly_overtime(days, policy)
    return WeeklyOvertimeResponse(
        **WeeklyOvertimeRead.model_validate(result).model_dump(),
        policy=OvertimePolicyRead.model_validate(policy),
    )


@router.post("/api/compliance/weekly", response_model=WeeklyComplianceRead)
def weekly_compliance(payload: WeeklyComplianceRequest) -> WeeklyComplianceRead:
    result = evaluate_weekly_compliance(
        [item.to_domain() for item in payload.aggregates],
        _compliance_policy(payload.policy),
        location_categories=payload.location_categories,
    )
    return WeeklyComplianceRead.model_validate(result)


@router.post("/api/workdays/week", response_model=WeekSummaryResponse)
def week_summary(payload: WeekSummaryRequest) -> WeekSummaryResponse:
    compliance_policy = _compliance_policy(payload.policy)
    week_starts_on = payload.week_starts_on if payload.week_starts_on is not None else get_week_starts_on()
    week_start, _week_end = week_bounds(payload.date, week_starts_on)

    aggregates = reconcile_events(
        [event.to_domain() for event in payload.events],
        tz=_timezone(payload.timezone),
        minimum_minutes_per_day=compliance_policy.minimum_minutes_per_day,
    )
    summary = summarize_week(
        aggregates,
        week_start=week_start,
        overtime_policy=_overtime_policy(payload.jurisdiction, payload.override),
        compliance_policy=compliance_policy,
        location_categories=payload.location_categories,
    )
    in_week = [item for item in aggregates if summary.week_start <= item.date <= summary.week_end]
    return WeekSummaryResponse(
        week_start=summary.week_start,
        week_end=summary.week_end,
        total_minutes=summary.total_minutes,
        overtime=WeeklyOvertimeRead.model_validate(summary.overtime),
        compliance=WeeklyComplianceRead.model_validate(summary.compliance),
        days=[WeekDayStatusRead.model_validate(item) for item in summary.days],
        workdays=[_aggregate_read(item) for item in in_week],
    )
