from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date

from timekeeping.errors import InvalidInputError
from timekeeping.models import (
    CompliancePolicy,
    CompliancePolicyDocument,
    DailyAggregate,
    LocationCategory,
    WeeklyComplianceResult,
)

logger = logging.getLogger("timekeeping.compliance")

REMOTE_LOCATION_CATEGORIES = frozenset({LocationCategory.HOME})
SYSTEM_DEFAULT_COMPLIANCE_POLICY = CompliancePolicy(
    required_days_per_week=3,
    minimum_minutes_per_day=0,
)


def _is_remote(location_id: str, location_categories: Mapping[str, LocationCategory] | None) -> bool:
    if not location_categories:
        return False
    category = location_categories.get(location_id)
    return category in REMOTE_LOCATION_CATEGORIES


def ensure_single_user(aggregates: Iterable[DailyAggregate]) -> list[DailyAggregate]:
    items = list(aggregates)
    user_ids = sorted({item.user_id for item in items})
    if len(user_ids) > 1:
        raise InvalidInputError(
            "MIXED_USERS",
            f"Aggregates for users {', '.join(repr(user_id) for user_id in user_ids)} cannot be evaluated together",
        )
    return items


def counted_dates(
    aggregates: Iterable[DailyAggregate],
    policy: CompliancePolicy,
    location_categories: Mapping[str, LocationCategory] | None = None,
) -> set[date]:
    dates: set[date] = set()
    for aggregate in aggregates:
        if not aggregate.meets_policy:
            continue
        if _is_remote(aggregate.location_id, location_categories):
            continue
        if policy.weekdays_only and aggregate.date.weekday() >= 5:
            continue
        dates.add(aggregate.date)
    return dates


def evaluate_weekly_compliance(
    aggregates: Iterable[DailyAggregate],
    policy: CompliancePolicy = SYSTEM_DEFAULT_COMPLIANCE_POLICY,
    *,
    location_categories: Mapping[str, LocationCategory] | None = None,
) -> WeeklyComplianceResult:
    """Count distinct in-person days that met the daily floor.

    Days at a HOME location never count. Two aggregates on the same date
    (e.g. two sites) count once. Locations missing from
    ``location_categories`` are treated as in-person. Aggregates for more
    than one user raise ``InvalidInputError``.
    """
    items = ensure_single_user(aggregates)
    days_worked = len(counted_dates(items, policy, location_categories))
    required_days = max(0, policy.required_days_per_week)
    return WeeklyComplianceResult(
        days_worked=days_worked,
        required_days=required_days,
        is_compliant=days_worked >= required_days,
    )


def select_compliance_document(
    documents: Iterable[CompliancePolicyDocument],
    *,
    jurisdiction: str | None = None,
    as_of: date | None = None,
) -> CompliancePolicyDocument | None:
    candidates = [
        item
        for item in documents
        if item.is_active and (as_of is None or item.effective_date <= as_of)
    ]
    candidates.sort(key=lambda item: item.effective_date, reverse=True)

    wanted = (jurisdiction or "").strip().upper()
    if wanted:
        for item in candidates:
            if (item.jurisdiction or "").strip().upper() == wanted:
                return item

    for item in candidates:
        if item.jurisdiction is None:
            return item
    return None


def select_compliance_policy(
    documents: Iterable[CompliancePolicyDocument],
    *,
    jurisdiction: str | None = None,
    as_of: date | None = None,
    default: CompliancePolicy | None = None,
) -> CompliancePolicy:
    document = select_compliance_document(documents, jurisdiction=jurisdiction, as_of=as_of)
    if document is not None:
        return document.policy
    logger.info(
        "compliance_policy_default_used",
        extra={"jurisdiction": jurisdiction, "as_of": as_of.isoformat() if as_of else None},
    )
    return default or SYSTEM_DEFAULT_COMPLIANCE_POLICY
