from __future__ import annotations

from dataclasses import fields, replace
from typing import Any

from timekeeping.models import OvertimePolicy, OvertimePolicyPatch

DEFAULT_OVERTIME_POLICY = OvertimePolicy(
    weekly_threshold_minutes=2400,
    daily_threshold_minutes=0,
    daily_double_time_minutes=0,
    seventh_day_rule=False,
)

CA_OVERTIME_POLICY = OvertimePolicy(
    weekly_threshold_minutes=2400,
    daily_threshold_minutes=480,
    daily_double_time_minutes=720,
    seventh_day_rule=True,
)

JURISDICTION_POLICIES: dict[str, OvertimePolicy] = {
    "US-FLSA": DEFAULT_OVERTIME_POLICY,
    "US-CA": CA_OVERTIME_POLICY,
}

KNOWN_JURISDICTIONS: list[dict[str, Any]] = [
    {
        "code": "US-CA",
        "name": "California",
        "features": {
            "mealBreakRequired": True,
            "mealBreakAfterMinutes": 300,
            "mealBreakDuration": 30,
            "restBreakRequired": True,
            "restBreakInterval": 240,
            "restBreakDuration": 10,
            "overtimeThresholdDaily": 480,
        },
    },
    {"code": "US-NY", "name": "New York", "features": {"overtimeThresholdWeekly": 2400}},
    {"code": "US-OR", "name": "Oregon", "features": {"predictiveScheduling": True, "advanceNoticeHours": 336}},
    {
        "code": "US-WA-SEA",
        "name": "Seattle",
        "features": {"predictiveScheduling": True, "advanceNoticeHours": 336, "clopeningMinHours": 10},
    },
    {
        "code": "US-IL-CHI",
        "name": "Chicago",
        "features": {"predictiveScheduling": True, "advanceNoticeHours": 336, "clopeningMinHours": 10},
    },
    {"code": "US-CA-SF", "name": "San Francisco", "features": {"predictiveScheduling": True, "advanceNoticeHours": 336}},
    {"code": "US-CA-LA", "name": "Los Angeles", "features": {"predictiveScheduling": True, "advanceNoticeHours": 336}},
    {
        "code": "US-PA-PHL",
        "name": "Philadelphia",
        "features": {"predictiveScheduling": True, "advanceNoticeHours": 336, "clopeningMinHours": 10},
    },
    {"code": "DEFAULT", "name": "Federal Default", "features": {"overtimeThresholdWeekly": 2400}},
]


def _normalize_code(jurisdiction_code: str | None) -> str:
    return (jurisdiction_code or "").strip().upper()


def base_policy_for(jurisdiction_code: str | None) -> OvertimePolicy:
    code = _normalize_code(jurisdiction_code)
    if not code:
        return DEFAULT_OVERTIME_POLICY
    return JURISDICTION_POLICIES.get(code, DEFAULT_OVERTIME_POLICY)


def apply_policy_patch(base: OvertimePolicy, patch: OvertimePolicyPatch | None) -> OvertimePolicy:
    if patch is None:
        return base
    changes = {
        item.name: getattr(patch, item.name)
        for item in fields(OvertimePolicyPatch)
        if getattr(patch, item.name) is not None
    }
    if not changes:
        return base
    return replace(base, **changes)


def resolve_overtime_policy(
    jurisdiction_code: str | None = None,
    override: OvertimePolicyPatch | None = None,
) -> OvertimePolicy:
    """Resolve the overtime policy for a jurisdiction and an org patch.

    Precedence is field by field: a value set on ``override`` wins over the
    jurisdiction's built-in policy, which wins over the global default.
    Unknown or blank codes resolve to the default policy without error.
    """
    return apply_policy_patch(base_policy_for(jurisdiction_code), override)


def is_daily_overtime(total_minutes: int, policy: OvertimePolicy = DEFAULT_OVERTIME_POLICY) -> bool:
    if policy.daily_threshold_minutes <= 0:
        return False
    return total_minutes > policy.daily_threshold_minutes


def is_weekly_overtime(total_week_minutes: int, policy: OvertimePolicy = DEFAULT_OVERTIME_POLICY) -> bool:
    if policy.weekly_threshold_minutes <= 0:
        return False
    return total_week_minutes > policy.weekly_threshold_minutes


def is_known_jurisdiction(jurisdiction_code: str | None) -> bool:
    code = _normalize_code(jurisdiction_code)
    if code in JURISDICTION_POLICIES:
        return True
    return any(item["code"] == code for item in KNOWN_JURISDICTIONS)
